"""Configuration management for SentimentHub."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""

    # OpenAI API
    openai_api_key: str = Field("", description="OpenAI API key")
    OPENAI_API_KEY: str = Field("", description="OpenAI API key (alternative naming)")
    openai_model: str = Field("gpt-4o-mini", description="Chat model used for sentiment classification")
    classifier_timeout: float = Field(30.0, description="Timeout in seconds for one classification call")

    @property
    def effective_openai_key(self) -> str:
        """Get the effective OpenAI API key from either field."""
        return self.openai_api_key or self.OPENAI_API_KEY

    # Web search API (Twitter/Reddit/news/web snippets)
    search_api_url: str = Field("", description="Base URL of the web search API")
    search_api_key: str = Field("", description="Bearer key for the web search API")
    search_timeout: float = Field(20.0, description="Timeout in seconds for one search request")
    retrieval_timeout: float = Field(60.0, description="Timeout in seconds for one source during fan-out")
    use_example_fallback: bool = Field(True, description="Fall back to built-in example snippets when a source yields nothing")
    sources_config: str = Field("config/sources.yaml", description="YAML file with per-source query templates")

    # Reddit API
    reddit_client_id: str = Field("", description="Reddit client ID")
    reddit_client_secret: str = Field("", description="Reddit client secret")
    reddit_user_agent: str = Field("SentimentHub/1.0", description="Reddit user agent")

    # Persistence
    database_url: str = Field("sqlite:///./sentimenthub.db", description="SQL database URL; empty keeps everything in memory")

    # Owner notifications (email channel)
    notification_url: str = Field("", description="Endpoint receiving owner email notifications")
    notification_api_key: str = Field("", description="Bearer key for the notification endpoint")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    # Retry / cache
    max_retries: int = Field(3, description="Maximum retry attempts")
    retry_delay: float = Field(1.0, description="Base retry delay in seconds")
    retry_backoff: float = Field(2.0, description="Retry backoff multiplier")
    cache_dir: str = Field(".cache/llm_cache", description="Directory for cached LLM responses")
    llm_cache_enabled: bool = Field(True, description="Cache LLM responses on disk")

    # Monitoring
    monitor_max_workers: int = Field(1, description="Subscriptions processed in parallel during a sweep")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()
