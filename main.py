#!/usr/bin/env python3
"""
User Directory -- signup, login and CRUD over a users table.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 0.0.0.0 --reload

Environment variables (or .env):
  SECRET_KEY     Signs session tokens and salts password hashes. Required
                 unless DEBUG=true. At least 32 characters.
  DATABASE_URL   SQLAlchemy async URL. Default: SQLite file next to the code.
  DEBUG          true to auto-generate SECRET_KEY and return stack traces.
"""

import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="userdir",
        description="Run the user directory API server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --port 8080
  DEBUG=true python main.py --reload
        """,
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Interface to bind (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=3002,
        help="Port to listen on (default: 3002)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change (development only)",
    )
    args = parser.parse_args()

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
