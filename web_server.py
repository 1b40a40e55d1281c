#!/usr/bin/env python3
"""
CLI tool to start the crisis line scheduling web server.

Starts the FastAPI backend (backend.src.main:app) under uvicorn.

Usage:
    python3 web_server.py                    # Start with defaults
    python3 web_server.py --host 0.0.0.0     # Listen on all interfaces
    python3 web_server.py --port 8080        # Use custom port
    python3 web_server.py --reload           # Enable auto-reload for development

Environment Variables:
    CRISISLINE_DB_URL: Database URL
    CRISISLINE_ENV: Environment (production/development, default: development)
    CRISISLINE_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)

The server itself can also be started directly:
    uvicorn backend.src.main:app --host 0.0.0.0 --port 8000
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn
from dotenv import load_dotenv


def load_env_file() -> None:
    """
    Load environment variables from backend/.env.

    Variables already set in the environment take precedence.
    """
    env_path = Path(__file__).parent / "backend" / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Arguments:
        --host: Host to bind (default: 127.0.0.1)
        --port: Port to bind (default: 8000)
        --reload: Enable auto-reload for development (default: False)
    """
    parser = argparse.ArgumentParser(
        description="Start the crisis line scheduling web server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start development server with auto-reload
  python3 web_server.py --reload

  # Production configuration
  python3 web_server.py --host 0.0.0.0 --port 8000

Environment Variables:
  CRISISLINE_DB_URL      Database URL
  CRISISLINE_ENV         Environment (production/development)
  CRISISLINE_LOG_LEVEL   Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        """
    )

    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind the server to (default: 127.0.0.1). "
             "Use 0.0.0.0 to listen on all interfaces."
    )

    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind the server to (default: 8000)"
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development. Not recommended for production."
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the web server CLI tool.

    Exit Codes:
        0: Server stopped normally
    """
    args = parse_arguments(argv)

    load_env_file()

    print("\nStarting crisis line scheduling web server...")
    print(f"Host: {args.host}")
    print(f"Port: {args.port}")
    print(f"Auto-reload: {'enabled' if args.reload else 'disabled'}")
    print(f"\nAPI documentation: http://{args.host}:{args.port}/docs")
    print(f"Health check: http://{args.host}:{args.port}/health")
    print("\nPress CTRL+C to stop the server\n")

    try:
        uvicorn.run(
            "backend.src.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level="info",
        )
    except KeyboardInterrupt:
        print("\n\nServer stopped by user (CTRL+C)")
        sys.exit(0)


if __name__ == "__main__":
    main()
