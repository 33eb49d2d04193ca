#!/usr/bin/env python3
"""
Run the Task Manager API under uvicorn.

Host, port and reload come from HOST, PORT and RELOAD; command-line flags
override them. Configuration is validated before the server starts so a
production deploy without JWT_SECRET_KEY fails fast.
"""

import argparse
import os

import uvicorn

from app.config.settings import get_settings


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Start the Task Manager API")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument(
        "--reload",
        action=argparse.BooleanOptionalAction,
        default=os.getenv("RELOAD", "true").lower() == "true",
    )
    return parser.parse_args()


def main():
    settings = get_settings()
    settings.validate()
    args = parse_args()

    print("Starting Task Manager API...")
    print(f"Environment: {settings.app_env}")
    print(f"Database: {settings.database_url.split('@')[-1]}")
    print(f"Listening on {args.host}:{args.port} (reload={args.reload})")
    print("=" * 50)

    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower()
    )

if __name__ == "__main__":
    main()
