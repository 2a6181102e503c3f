#!/usr/bin/env python3
"""
Storefront Backend Runner
=========================

Usage:
    python run_app.py                    # Development mode with auto-reload
    python run_app.py --mode prod        # Production mode
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
"""

import argparse
import os
import sys

import uvicorn

from app.core.config import settings


def check_environment():
    """Report on local files the app will pick up"""
    if os.path.exists(".env"):
        print(".env file found")
    else:
        print(".env file not found, using environment variables only")


def run_main_app(host: str, port: int, reload: bool, workers: int):
    """Run the FastAPI application under uvicorn"""
    print(f"Starting {settings.APP_NAME} on {host}:{port}")
    print(f"API Docs: http://{host}:{port}/api/docs")

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=None if reload else workers,
        log_level="debug" if settings.DEBUG else "info",
    )


def main():
    parser = argparse.ArgumentParser(
        description="Storefront Backend Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_app.py                      # Development server
  python run_app.py --mode prod          # Production mode
  python run_app.py --port 8001          # Custom port
        """
    )

    parser.add_argument(
        "--mode",
        choices=["dev", "prod"],
        default="dev",
        help="Server mode (default: dev)"
    )
    parser.add_argument(
        "--host",
        default=settings.HOST,
        help=f"Host to bind to (default: {settings.HOST})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Port to bind to (default: {settings.PORT})"
    )
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload in dev mode"
    )

    args = parser.parse_args()

    check_environment()

    reload = not args.no_reload and args.mode != "prod"
    workers = settings.WORKERS if args.mode == "prod" else 1

    try:
        run_main_app(args.host, args.port, reload, workers)
    except KeyboardInterrupt:
        print("\nServer stopped by user")

    return 0


if __name__ == "__main__":
    sys.exit(main())
