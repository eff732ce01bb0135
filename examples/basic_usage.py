"""Basic usage examples for SentimentHub."""

import os

from sentimenthub import create_app
from sentimenthub.core.models import SentimentBucket


def example_one_off_analysis(hub):
    """Example: analyze a product right now."""
    print("🔍 Analyzing: ChatGPT")

    result = hub.analyze("ChatGPT", owner="demo")
    if not result.has_data:
        print("No discussions found")
        return

    summary = result.summary
    print(f"📊 Analyzed {summary.total_analyzed} comments via {summary.classified_by}")
    print(f"🎯 Overall: {summary.overall_label.value}")
    print(f"  +{summary.positive_ratio}% / -{summary.negative_ratio}% / ={summary.neutral_ratio}%")
    print(f"📋 Themes: {', '.join(summary.key_themes)}")
    for ex in summary.exemplars[SentimentBucket.POSITIVE]:
        print(f"  👍 [{ex.source_label}] {ex.text[:100]}")


def example_monitoring(hub):
    """Example: subscribe to a product and run a sweep."""
    print("\n🔍 Monitoring: Claude")

    sub = hub.create_subscription("demo", "Claude", cadence="daily", change_threshold_percent=15)
    print(f"Created monitor #{sub.id}")

    report = hub.run_monitoring_sweep()
    for outcome in report.outcomes:
        print(f"  {outcome.subject}: {outcome.status.value} (score {outcome.score})")

    for point in hub.get_trend("Claude"):
        print(f"  {point.recorded_at:%Y-%m-%d %H:%M} score {point.overall_score}")
    print(f"🔔 {hub.unread_count('demo')} unread notifications")


if __name__ == "__main__":
    if not os.getenv("OPENAI_API_KEY"):
        print("⚠️ OPENAI_API_KEY not set, keyword classification will be used")

    print("🚀 SentimentHub Examples")
    print("=" * 50)

    app = create_app()
    try:
        example_one_off_analysis(app)
        example_monitoring(app)
        print("\n✅ All examples completed successfully!")
    except Exception as e:
        print(f"\n❌ Error: {e}")
        import traceback
        traceback.print_exc()
