"""CLI entry point for the maoyan-mcp server."""

import argparse
import logging

from maoyan_mcp.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="maoyan-mcp",
        description="MCP server for nearby cinemas, cinema schedules and movie details from Maoyan.",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default=settings.transport,
        help=f"MCP transport (default: {settings.transport})",
    )
    parser.add_argument("--host", default=settings.host, help="Bind address for HTTP transports")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port for HTTP transports")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose/debug logging.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    from maoyan_mcp.server import run

    run(transport=args.transport, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
