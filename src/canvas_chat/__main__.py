"""cli entrypoint for canvas chat."""

import argparse
import logging


def main():
    parser = argparse.ArgumentParser(
        description="canvas chat - branching conversations on an infinite canvas"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="run the http api")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", "-p", type=int, default=8000)
    serve.add_argument(
        "--mock",
        "-m",
        action="store_true",
        help="use mock client (no api calls, for testing)",
    )

    tui = sub.add_parser("tui", help="run the terminal canvas")
    tui.add_argument(
        "--mock",
        "-m",
        action="store_true",
        help="use mock client (no api calls, for testing)",
    )
    tui.add_argument(
        "--history",
        help="path to the snapshot history file (default: ~/.canvas-chat/canvas-history.json)",
    )

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper())

    if args.command == "serve":
        import uvicorn
        from .api import server

        server.state.mock = args.mock
        uvicorn.run(server.app, host=args.host, port=args.port)
    else:
        from .app import run

        run(mock=getattr(args, "mock", False), history_path=getattr(args, "history", None))


if __name__ == "__main__":
    main()
