"""Command-line launcher for the Arcade Snake server and leaderboard."""

from __future__ import annotations

import argparse
import logging
import sys

from arcade_snake.config import ServerSettings
from arcade_snake.leaderboard import LeaderboardError, SqliteLeaderboard

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    defaults = ServerSettings()
    parser = argparse.ArgumentParser(
        prog="arcade-snake",
        description="Arcade Snake game server and leaderboard tools.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- serve ---
    serve_p = sub.add_parser("serve", help="Run the HTTP/WebSocket server.")
    serve_p.add_argument("--host", type=str, default=defaults.host)
    serve_p.add_argument("--port", type=int, default=defaults.port)
    serve_p.add_argument("--db", type=str, default=defaults.db_path)
    serve_p.add_argument(
        "--max-sessions", type=int, default=defaults.max_sessions,
    )

    # --- scores ---
    scores_p = sub.add_parser("scores", help="Print the leaderboard.")
    scores_p.add_argument("--db", type=str, default=defaults.db_path)

    # --- submit ---
    submit_p = sub.add_parser("submit", help="Record a score.")
    submit_p.add_argument("name", help="Player name (empty for Anonymous).")
    submit_p.add_argument("score", type=int)
    submit_p.add_argument("--db", type=str, default=defaults.db_path)

    return parser


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from arcade_snake.server.app import create_app

    settings = ServerSettings(
        host=args.host,
        port=args.port,
        db_path=args.db,
        max_sessions=args.max_sessions,
    )
    logger.info("Serving on http://%s:%d", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
    return 0


def _run_scores(args: argparse.Namespace) -> int:
    store = SqliteLeaderboard(args.db)
    try:
        entries = store.fetch_top()
    finally:
        store.close()

    if not entries:
        print("No scores yet. Be the first!")  # noqa: T201
        return 0
    for rank, entry in enumerate(entries, start=1):
        print(f"{rank}. {entry.name} — {entry.score} pts — {entry.date}")  # noqa: T201
    return 0


def _run_submit(args: argparse.Namespace) -> int:
    if args.score < 0:
        logger.error("Score must be >= 0.")
        return 2
    store = SqliteLeaderboard(args.db)
    try:
        row_id = store.submit(args.name, args.score)
    finally:
        store.close()
    print(f"Saved score {args.score} (id {row_id}).")  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``arcade-snake`` CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "serve": _run_serve,
        "scores": _run_scores,
        "submit": _run_submit,
    }
    try:
        return handlers[args.command](args)
    except LeaderboardError as exc:
        logger.error("Leaderboard unavailable: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
