"""Command-line interface for SentimentHub."""

import argparse
import logging
import sys

from .app import create_app
from .core.config import settings
from .core.constants import FileConstants, MonitorConstants, TrendConstants
from .core.errors import SentimentHubError
from .core.models import SentimentBucket
from .utils.data_prep import export_to_json, prepare_export

logger = logging.getLogger(__name__)

DEFAULT_OWNER = "local"


def setup_logging():
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=FileConstants.LOG_FORMAT,
    )


def cmd_analyze(app, args):
    """Analyze command."""
    print(f"Analyzing '{args.subject}'...")
    result = app.analyze(args.subject, owner=args.owner)

    if not result.has_data:
        print("No discussions found for this product, try another name.")
        return

    summary = result.summary
    print(f"\nSentiment Summary for '{summary.subject}':")
    print(f"Overall: {summary.overall_label.value} (via {summary.classified_by})")
    print(f"Positive {summary.positive_ratio}% | Negative {summary.negative_ratio}% | "
          f"Neutral {summary.neutral_ratio}%")
    print(f"Comments analyzed: {summary.total_analyzed}")
    print("Sources: " + ", ".join(f"{k}={v}" for k, v in summary.source_breakdown.items()))
    print(f"\n{summary.narrative_summary}")

    print(f"\nKey themes: {', '.join(summary.key_themes)}")
    for bucket in SentimentBucket:
        exemplars = summary.exemplars.get(bucket, [])
        if exemplars:
            print(f"\n{bucket.value.title()} comments:")
            for ex in exemplars:
                who = f" ({ex.author})" if ex.author else ""
                print(f"  - [{ex.source_label}{who}] {ex.text[:160]}")

    if result.record_id is not None:
        print(f"\nSaved as analysis #{result.record_id}")
    if result.save_error:
        print(f"\nWarning: analysis was not saved: {result.save_error}")

    if args.out:
        export_to_json(prepare_export(summary, record_id=result.record_id), args.out)
        print(f"Results exported to {args.out}")


def cmd_trend(app, args):
    """Trend command."""
    points = app.get_trend(args.subject, args.limit)
    if not points:
        print(f"No trend history for '{args.subject}'")
        return
    print(f"Trend for '{args.subject}' (most recent first):")
    for p in points:
        print(f"  {p.recorded_at:%Y-%m-%d %H:%M}  score {p.overall_score:3d}  "
              f"+{p.positive_ratio}/-{p.negative_ratio}/={p.neutral_ratio}  ({p.total_count} comments)")


def cmd_monitor(app, args):
    """Monitor subscription management."""
    if args.monitor_command == "add":
        sub = app.create_subscription(
            args.owner,
            args.subject,
            cadence=args.cadence,
            change_threshold_percent=args.threshold,
            notify_by_email=args.email,
            notify_in_app=args.in_app,
        )
        print(f"Created monitor #{sub.id} for '{sub.subject}' ({sub.cadence.value}, "
              f"threshold {sub.change_threshold_percent}%)")

    elif args.monitor_command == "list":
        subs = app.list_subscriptions(args.owner)
        if not subs:
            print("No monitors configured")
            return
        for sub in subs:
            status = "active" if sub.active else "paused"
            last = f"{sub.last_run_at:%Y-%m-%d %H:%M}" if sub.last_run_at else "never"
            score = sub.last_score if sub.last_score is not None else "-"
            print(f"  #{sub.id} {sub.subject} [{status}, {sub.cadence.value}, "
                  f"threshold {sub.change_threshold_percent}%] last run {last}, score {score}")

    elif args.monitor_command == "update":
        changes = {}
        if args.active is not None:
            changes["active"] = args.active
        if args.cadence is not None:
            changes["cadence"] = args.cadence
        if args.threshold is not None:
            changes["change_threshold_percent"] = args.threshold
        if args.email is not None:
            changes["notify_by_email"] = args.email
        if args.in_app is not None:
            changes["notify_in_app"] = args.in_app
        sub = app.update_subscription(args.owner, args.id, **changes)
        print(f"Updated monitor #{sub.id}")

    elif args.monitor_command == "remove":
        app.delete_subscription(args.owner, args.id)
        print(f"Removed monitor #{args.id}")


def cmd_sweep(app, args):
    """Run all due monitors once."""
    report = app.run_monitoring_sweep(force=args.force)
    for outcome in report.outcomes:
        line = f"  #{outcome.subscription_id} {outcome.subject}: {outcome.status.value}"
        if outcome.score is not None:
            line += f" (score {outcome.score})"
        if outcome.change is not None:
            line += f" change {outcome.change.direction.value} {outcome.change.magnitude}"
        if outcome.error:
            line += f" error: {outcome.error}"
        print(line)
    counts = report.to_dict()
    print("Sweep finished: " + ", ".join(f"{k}={v}" for k, v in counts.items()))


def cmd_notifications(app, args):
    """Notification inbox."""
    if args.mark_read is not None:
        app.mark_notification_read(args.owner, args.mark_read)
        print(f"Marked notification #{args.mark_read} as read")
        return
    items = app.notifications(args.owner, unread_only=args.unread)
    print(f"{app.unread_count(args.owner)} unread notifications")
    for n in items:
        flag = " " if n.read else "*"
        print(f" {flag} #{n.id} {n.created_at:%Y-%m-%d %H:%M} {n.title}")
        print(f"     {n.message}")


def cmd_export(app, args):
    """Export a saved analysis."""
    app.export_analysis(args.owner, args.id, args.out, include_trend=not args.no_trend)
    print(f"Exported analysis #{args.id} to {args.out}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SentimentHub - Product Sentiment Monitoring")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a product now")
    analyze_parser.add_argument("subject", help="Product name")
    analyze_parser.add_argument("--owner", help="Save the analysis to this user's history")
    analyze_parser.add_argument("--out", help="Output JSON file")

    trend_parser = subparsers.add_parser("trend", help="Show sentiment history")
    trend_parser.add_argument("subject", help="Product name")
    trend_parser.add_argument("--limit", type=int, default=TrendConstants.DEFAULT_HISTORY_LIMIT,
                              help="Number of points to show")

    monitor_parser = subparsers.add_parser("monitor", help="Manage monitors")
    monitor_sub = monitor_parser.add_subparsers(dest="monitor_command", required=True)

    add_parser = monitor_sub.add_parser("add", help="Create a monitor")
    add_parser.add_argument("subject", help="Product name")
    add_parser.add_argument("--owner", default=DEFAULT_OWNER)
    add_parser.add_argument("--cadence", default="daily", choices=["daily", "weekly", "monthly"])
    add_parser.add_argument("--threshold", type=int, default=MonitorConstants.DEFAULT_THRESHOLD,
                            help="Score change (points) that triggers an alert")
    add_parser.add_argument("--email", action="store_true", help="Send email alerts")
    add_parser.add_argument("--no-in-app", dest="in_app", action="store_false",
                            help="Disable in-app alerts")

    list_parser = monitor_sub.add_parser("list", help="List monitors")
    list_parser.add_argument("--owner", default=DEFAULT_OWNER)

    update_parser = monitor_sub.add_parser("update", help="Change a monitor")
    update_parser.add_argument("id", type=int)
    update_parser.add_argument("--owner", default=DEFAULT_OWNER)
    update_parser.add_argument("--active", action=argparse.BooleanOptionalAction, default=None)
    update_parser.add_argument("--cadence", choices=["daily", "weekly", "monthly"])
    update_parser.add_argument("--threshold", type=int)
    update_parser.add_argument("--email", action=argparse.BooleanOptionalAction, default=None)
    update_parser.add_argument("--in-app", dest="in_app", action=argparse.BooleanOptionalAction, default=None)

    remove_parser = monitor_sub.add_parser("remove", help="Delete a monitor")
    remove_parser.add_argument("id", type=int)
    remove_parser.add_argument("--owner", default=DEFAULT_OWNER)

    sweep_parser = subparsers.add_parser("sweep", help="Run all due monitors")
    sweep_parser.add_argument("--force", action="store_true", help="Run monitors that are not due yet")

    notif_parser = subparsers.add_parser("notifications", help="Show notifications")
    notif_parser.add_argument("--owner", default=DEFAULT_OWNER)
    notif_parser.add_argument("--unread", action="store_true", help="Only unread notifications")
    notif_parser.add_argument("--mark-read", type=int, metavar="ID", help="Mark a notification as read")

    export_parser = subparsers.add_parser("export", help="Export a saved analysis")
    export_parser.add_argument("id", type=int, help="Analysis id")
    export_parser.add_argument("--owner", default=DEFAULT_OWNER)
    export_parser.add_argument("--out", required=True, help="Output JSON file")
    export_parser.add_argument("--no-trend", action="store_true", help="Leave out trend history")

    return parser


COMMANDS = {
    "analyze": cmd_analyze,
    "trend": cmd_trend,
    "monitor": cmd_monitor,
    "sweep": cmd_sweep,
    "notifications": cmd_notifications,
    "export": cmd_export,
}


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    setup_logging()

    try:
        app = create_app()
        COMMANDS[args.command](app, args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
    except SentimentHubError as e:
        logger.error(f"Command failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
