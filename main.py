#!/usr/bin/env python3
"""
UserDirectory -- authenticated CRUD over an in-memory user directory.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 0.0.0.0 --port 4000
  python main.py --reload

Environment variables (see core/config.py):
  SECRET_KEY   Token signing key, at least 32 characters. Required unless DEBUG=true.
  DEBUG        Set to true to auto-generate SECRET_KEY for local use.
  PORT         Listening port (default 4000). --port overrides it.
  HOST         Listening address (default 127.0.0.1). --host overrides it.
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="UserDirectory -- authenticated CRUD demo server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="The store is in memory and reseeded on every start. Demo login: demo@example.com / password",
    )
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Listening port (default: {settings.port})")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    args = parser.parse_args()

    print(f"Server listening on http://{args.host}:{args.port}")
    print(f"Web UI at http://{args.host}:{args.port}/ui")
    uvicorn.run(
        "asgi:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
