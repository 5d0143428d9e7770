"""Entry point for rostercap package."""

import argparse
import logging
import os

from rostercap.config import get_config


def main() -> None:
    """Main entry point for the rostercap command line."""
    config = get_config()

    parser = argparse.ArgumentParser(
        description="rostercap - salary-cap fantasy football transfers",
        prog="rostercap",
    )
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help=f"SQLite database path (default: {config.db_path})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help=f"Logging level (default: {config.log_level})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create tables and default settings")

    import_parser = subparsers.add_parser("import-players", help="Load the player catalog from CSV")
    import_parser.add_argument("csv_path", help="CSV with player_id, position, current_price")
    import_parser.add_argument(
        "--season",
        type=int,
        default=None,
        help="Season whose floor price applies (default: current season)",
    )

    period_parser = subparsers.add_parser("set-period", help="Set the current period")
    period_parser.add_argument("value", help="Setup, Preseason or a week number")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    args = parser.parse_args()

    if args.db:
        config.db_path = args.db
        # Reloaded server processes read the environment
        os.environ["ROSTERCAP_DB_PATH"] = args.db
    if args.log_level:
        config.log_level = args.log_level

    errors = config.validate()
    if errors:
        parser.error("; ".join(errors))

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from rostercap.api.services import TransferService

    service = TransferService(config)

    if args.command == "init-db":
        service.init_db()
        print(f"Initialized {config.db_path}")
    elif args.command == "import-players":
        service.init_db()
        with service.repo() as repo:
            season = args.season or repo.get_current_season(config.default_season)
            floor = repo.get_roster_constraints(season).floor_price
            count = repo.import_players_csv(args.csv_path, floor_price=floor)
        print(f"Imported {count} players into {config.db_path}")
    elif args.command == "set-period":
        try:
            result = service.set_current_period(args.value)
        except ValueError as e:
            parser.error(str(e))
        print(
            f"Period {result['previous']} -> {result['current']}: "
            f"{result['rosters_copied']} roster entries copied"
        )
    elif args.command == "serve":
        from rostercap.api.main import run_api

        run_api(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
