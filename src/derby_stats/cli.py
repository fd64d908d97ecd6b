#!/usr/bin/env python3
"""
Command-line interface for derby stats.

Usage:
    derby-stats init                                   # Apply database migrations
    derby-stats games                                  # List games, latest first
    derby-stats stats GAME_ID --side home --period all # Jammer and line stats
    derby-stats stats GAME_ID --format json
    derby-stats timeline GAME_ID --period 2            # Cumulative score by jam
    derby-stats export GAME_ID --output ./exports      # JSON report for both sides
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import psycopg
from dotenv import load_dotenv

from .core.config import get_settings
from .core.errors import DerbyStatsError
from .core.models import GameStatsReport
from .core.types import ALL_PERIODS, TeamSide, parse_period_filter

logger = logging.getLogger("derby_stats.cli")


def get_db():
    """Get a database connection from settings."""
    from .pg_connection import PostgresDB

    return PostgresDB()


def get_repos(db):
    from .repositories import get_repositories

    return get_repositories(db)


def get_service(db):
    from .services import GameStatsService

    return GameStatsService(get_repos(db))


def _period_arg(value: str):
    try:
        return parse_period_filter(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def print_report(report: GameStatsReport) -> None:
    """Print jammer and line rows as aligned tables."""
    print(f"\nGame {report.game_id} - {report.side.value} - period {report.period}")
    print("=" * 72)

    print(f"\nJammers ({report.total_jams} jams with a jammer)")
    if not report.jammers:
        print("  No jammer data available for this team.")
    for row in report.jammers:
        print(
            f"  #{row.skater_number:<5} {row.skater_name:<24} "
            f"{row.jam_count:>3} jams  {row.lead_percentage:5.1f}% lead  "
            f"{row.points_for:>4} for  {row.points_against:>4} against"
        )

    print("\nLines")
    if not report.lines:
        print("  No blocker data available for this team.")
    for row in report.lines:
        print(
            f"  {row.line_name:<31} "
            f"{row.jam_count:>3} jams  {row.lead_percentage:5.1f}% lead  "
            f"{row.points_for:>4} for  {row.points_against:>4} against"
        )


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize the database with schema."""
    from .schema import init_database

    db = get_db()

    try:
        logger.info("Initializing derby stats database...")
        applied = init_database(db)
        logger.info("Database initialized successfully (%d migrations applied)", applied)
        return 0
    except psycopg.Error as e:
        logger.error("Failed to initialize database: %s", e)
        return 1
    finally:
        db.close()


def cmd_games(args: argparse.Namespace) -> int:
    """List games, latest first."""
    from .services import GameService

    db = get_db()
    try:
        games = GameService(get_repos(db)).list_games()
    except psycopg.Error as e:
        logger.error("Database error: %s", e)
        return 1
    finally:
        db.close()

    if not games:
        print("No games recorded.")
        return 0
    for game in games:
        date = game.start_date.date().isoformat() if game.start_date else "undated"
        home = game.team_name(TeamSide.home) or game.home_team_id
        visiting = game.team_name(TeamSide.visiting) or game.visiting_team_id
        print(f"{game.id}  {date:<10}  {home} vs {visiting}")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    """Show jammer and line statistics for a game."""
    db = get_db()
    try:
        report = get_service(db).build_report(args.game_id, args.side, args.period)
    except DerbyStatsError as e:
        logger.error("%s", e)
        return 1
    except psycopg.Error as e:
        logger.error("Database error: %s", e)
        return 1
    finally:
        db.close()

    if args.format == "json":
        print(json.dumps(report.model_dump(mode="json"), indent=2))
    else:
        print_report(report)
    return 0


def cmd_timeline(args: argparse.Namespace) -> int:
    """Show the cumulative score after each jam."""
    db = get_db()
    try:
        report = get_service(db).build_report(args.game_id, TeamSide.home, args.period)
    except DerbyStatsError as e:
        logger.error("%s", e)
        return 1
    except psycopg.Error as e:
        logger.error("Database error: %s", e)
        return 1
    finally:
        db.close()

    if not report.timeline:
        print("No score data available for this period.")
        return 0

    print(f"\n{'Jam':<10} {'Home':>6} {'Visiting':>9}")
    print("-" * 27)
    for point in report.timeline:
        print(f"{point.label:<10} {point.home_score:>6} {point.visiting_score:>9}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export reports for both sides of a game to a JSON file."""
    output_dir = Path(args.output) if args.output else Path("./exports")
    output_dir.mkdir(parents=True, exist_ok=True)

    db = get_db()
    try:
        service = get_service(db)
        game = service.get_game(args.game_id)
        reports = {
            side.value: service.build_report(args.game_id, side, args.period).model_dump(mode="json")
            for side in TeamSide
        }
    except DerbyStatsError as e:
        logger.error("%s", e)
        return 1
    except psycopg.Error as e:
        logger.error("Database error: %s", e)
        return 1
    finally:
        db.close()

    export_data = {
        "game": game.model_dump(mode="json"),
        "exported_at": datetime.now(tz=timezone.utc).isoformat(),
        "reports": reports,
    }
    output_file = output_dir / f"game_{args.game_id}.json"
    with open(output_file, "w") as f:
        json.dump(export_data, f, indent=2)

    logger.info("Exported game %s -> %s", args.game_id, output_file)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    load_dotenv()
    get_settings().setup_logging()

    parser = argparse.ArgumentParser(
        description="Derby Stats CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    subparsers.add_parser("init", help="Initialize the database")

    # games command
    subparsers.add_parser("games", help="List games, latest first")

    # stats command
    stats_parser = subparsers.add_parser("stats", help="Jammer and line statistics for a game")
    stats_parser.add_argument("game_id", help="Game ID")
    stats_parser.add_argument("--side", choices=[side.value for side in TeamSide], default=TeamSide.home.value)
    stats_parser.add_argument("--period", type=_period_arg, default=ALL_PERIODS, help="all, 1 or 2")
    stats_parser.add_argument("--format", choices=["table", "json"], default="table")

    # timeline command
    timeline_parser = subparsers.add_parser("timeline", help="Cumulative score by jam")
    timeline_parser.add_argument("game_id", help="Game ID")
    timeline_parser.add_argument("--period", type=_period_arg, default=ALL_PERIODS, help="all, 1 or 2")

    # export command
    export_parser = subparsers.add_parser("export", help="Export game reports to JSON")
    export_parser.add_argument("game_id", help="Game ID")
    export_parser.add_argument("--period", type=_period_arg, default=ALL_PERIODS, help="all, 1 or 2")
    export_parser.add_argument("--output", help="Output directory")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "init": cmd_init,
        "games": cmd_games,
        "stats": cmd_stats,
        "timeline": cmd_timeline,
        "export": cmd_export,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
