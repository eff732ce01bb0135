"""Main entry point for SentimentHub."""

from sentimenthub.cli import main

if __name__ == "__main__":
    main()
