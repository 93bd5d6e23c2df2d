"""Command line entry point.

Usage:
    calorie-snap serve
    calorie-snap recognize <image> [--food-name NAME] [--constrained]
    calorie-snap history [--date YYYY-MM-DD]
    calorie-snap totals [--days N]
    calorie-snap delete <record-id>
"""

import argparse
import asyncio
import errno
import logging
import socket
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from calorie_snap.app_logging import configure_logging
from calorie_snap.config import Settings
from calorie_snap.containers import build_client_container, build_container
from calorie_snap.domain.errors import RecognitionError
from calorie_snap.domain.nutrition import NutritionRecord
from calorie_snap.domain.records import CalorieRecord

_logger = logging.getLogger("calorie_snap.main")


class PortInUseError(RuntimeError):
    """Raised when the configured port cannot be bound."""


def ensure_port_available(host: str, port: int) -> None:
    """Fail fast if ``host:port`` is already bound."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        try:
            probe.bind((host, port))
        except OSError as exc:
            if exc.errno == errno.EADDRINUSE:
                raise PortInUseError(f"Port {port} is already in use") from exc
            raise


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    """Run the HTTP API on the configured port."""
    import uvicorn

    from calorie_snap.api.app import create_app

    port = args.port or settings.port
    try:
        ensure_port_available(settings.host, port)
    except PortInUseError as exc:
        _logger.error("%s; set PORT to a free port and retry", exc)
        return 1
    app = create_app(build_container(settings))
    uvicorn.run(app, host=settings.host, port=port)
    return 0


def cmd_recognize(args: argparse.Namespace, settings: Settings) -> int:
    """Recognize a food photo and add it to the history."""
    image_path = Path(args.image)
    if not image_path.is_file():
        print(f"Error: image not found: {image_path}")
        return 1
    container = build_client_container(settings)

    async def run() -> tuple[NutritionRecord, CalorieRecord]:
        try:
            return await container.workflow.capture(
                image_path.read_bytes(),
                image_path=str(image_path),
                constrained=args.constrained,
                food_name_hint=args.food_name,
            )
        finally:
            await container.close_resources()

    try:
        result, record = asyncio.run(run())
    except RecognitionError as exc:
        print(f"Recognition failed [{exc.category}]: {exc.message}")
        return 2
    print(format_result(result))
    print(f"Saved record {record.id}")
    return 0


def cmd_history(args: argparse.Namespace, settings: Settings) -> int:
    """List stored records, newest first."""
    store = build_client_container(settings).record_store
    if args.date:
        records = store.for_date(date.fromisoformat(args.date))
    else:
        records = store.all()
    records.sort(key=lambda record: record.timestamp, reverse=True)
    if not records:
        print("No records yet.")
        return 0
    for record in records:
        print(
            f"{record.date.isoformat()} {record.time}  "
            f"{record.food_name:<24} {record.calorie:>7.0f} kcal  {record.id}"
        )
    return 0


def cmd_totals(args: argparse.Namespace, settings: Settings) -> int:
    """Print per-day totals and the period summary."""
    store = build_client_container(settings).record_store
    for entry in store.daily_totals(args.days):
        print(f"{entry.day.month}/{entry.day.day}: {entry.total:.0f} kcal")
    summary = store.summary()
    print(f"Today: {round(summary.today_total)} kcal")
    print(f"7-day average: {round(summary.week_average)} kcal")
    print(f"30-day average: {round(summary.month_average)} kcal")
    return 0


def cmd_delete(args: argparse.Namespace, settings: Settings) -> int:
    """Delete a record by id."""
    store = build_client_container(settings).record_store
    store.delete(args.record_id)
    print(f"Deleted {args.record_id}")
    return 0


def format_result(result: NutritionRecord) -> str:
    """Render a recognition result for the terminal."""
    nutrition = result.nutrition
    return "\n".join(
        [
            f"Food: {result.food_name} (confidence {result.confidence:.0%})",
            f"Calories: {result.calorie_estimate}",
            f"GI: {result.gi_value}  Diabetes: {result.suitable_for_diabetes}",
            (
                f"Protein {nutrition.protein}, carbs {nutrition.carbs}, "
                f"fat {nutrition.fat}, total {nutrition.calories}"
            ),
            f"Advice: {result.health_tips}",
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="calorie-snap",
        description="Food photo calorie recognition",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = subparsers.add_parser("serve", help="Run the recognition API")
    serve_parser.add_argument("--port", type=int, help="Override the PORT setting")

    recognize_parser = subparsers.add_parser("recognize", help="Recognize a photo")
    recognize_parser.add_argument("image", help="Path to the food photo")
    recognize_parser.add_argument("--food-name", help="Hint used by mock providers")
    recognize_parser.add_argument(
        "--constrained",
        action="store_true",
        help="Use the smaller resize bound for slow connections",
    )

    history_parser = subparsers.add_parser("history", help="List stored records")
    history_parser.add_argument("--date", help="Only records for YYYY-MM-DD")

    totals_parser = subparsers.add_parser("totals", help="Show daily totals")
    totals_parser.add_argument(
        "--days", type=int, default=7, help="Window in days (default: 7)"
    )

    delete_parser = subparsers.add_parser("delete", help="Delete a record")
    delete_parser.add_argument("record_id", help="Record id")

    return parser


_COMMANDS = {
    "serve": cmd_serve,
    "recognize": cmd_recognize,
    "history": cmd_history,
    "totals": cmd_totals,
    "delete": cmd_delete,
}


def main(argv: Sequence[str] | None = None, settings: Settings | None = None) -> int:
    """Parse arguments and dispatch to a command."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1
    return _COMMANDS[args.command](args, settings or Settings())


if __name__ == "__main__":
    raise SystemExit(main())
