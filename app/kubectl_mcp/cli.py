"""
Command line entry point for the Kubectl MCP Server.

Supports both stdio and streamable-http transports.
"""

import argparse
import sys
from typing import Optional

from pydantic import ValidationError

from kubectl_mcp import __version__
from kubectl_mcp.config import load_config
from kubectl_mcp.server import create_server
from kubectl_mcp.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="MCP Server exposing kubectl operations as tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start with stdio transport (default)
  kubectl-mcp --transport stdio

  # Start with HTTP transport
  kubectl-mcp --transport streamable-http --port 8080

  # Use custom config directory
  kubectl-mcp --config-dir /path/to/config
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"kubectl-mcp {__version__}",
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        help="Configuration directory path (default: ~/.kubectl-mcp/)",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "streamable-http"],
        help="Transport protocol (overrides config)",
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Host to bind to (for HTTP transport, overrides config)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (for HTTP transport, overrides config)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (overrides config)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config_dir)
    except ValidationError as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    if args.transport:
        config.server.transport = args.transport
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.log_level:
        config.server.log_level = args.log_level

    setup_logging(config.server.log_level, config.server.log_file)

    bundle = create_server(config)
    logger.info(f"Starting kubectl MCP server v{__version__} ({config.server.transport})")

    try:
        if config.server.transport == "stdio":
            bundle.server.run(transport="stdio")
        else:
            logger.info(f"Running on http://{config.server.host}:{config.server.port}")
            bundle.server.run(
                transport="streamable-http",
                host=config.server.host,
                port=config.server.port,
            )
    except KeyboardInterrupt:
        logger.info("Shutting down...")

    return 0


if __name__ == "__main__":
    sys.exit(main())
