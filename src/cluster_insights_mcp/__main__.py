"""Entry point for Cluster Insights MCP server."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from cluster_insights_mcp import __version__
from cluster_insights_mcp.config import (
    AuthMode,
    ClusterInsightsConfig,
    LogLevel,
    TransportMode,
)


def setup_logging(level: LogLevel) -> None:
    """Configure logging for the server.

    Logs go to stderr; stdout carries the stdio transport.
    """
    logging.basicConfig(
        level=level.value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="cluster-insights-mcp",
        description="MCP server for Kubernetes cluster capacity analysis",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Transport options
    parser.add_argument(
        "--transport",
        choices=[mode.value for mode in TransportMode],
        default=None,
        help="Transport mode (default: from config or stdio)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind HTTP server to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind HTTP server to (default: 8000)",
    )

    # Auth options
    parser.add_argument(
        "--auth-mode",
        choices=[mode.value for mode in AuthMode],
        default=None,
        help="Authentication mode (default: auto)",
    )
    parser.add_argument(
        "--kubeconfig",
        default=None,
        help="Path to kubeconfig file",
    )
    parser.add_argument(
        "--context",
        default=None,
        help="Kubeconfig context to use",
    )

    # Inventory options
    parser.add_argument(
        "--sequential-fetch",
        action="store_true",
        help="List nodes, pods and namespaces one after another instead of concurrently",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=None,
        help="Timeout in seconds for each Kubernetes list request (default: 30)",
    )
    parser.add_argument(
        "--inventory-file",
        default=None,
        help="Analyse a JSON/YAML inventory dump instead of a live cluster",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=None,
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ClusterInsightsConfig:
    """Build config from args, falling back to environment/defaults."""
    config_kwargs: dict[str, Any] = {}

    if args.transport:
        config_kwargs["transport"] = TransportMode(args.transport)

    if args.host:
        config_kwargs["host"] = args.host

    if args.port:
        config_kwargs["port"] = args.port

    if args.auth_mode:
        config_kwargs["auth_mode"] = AuthMode(args.auth_mode)

    if args.kubeconfig:
        config_kwargs["kubeconfig_path"] = Path(args.kubeconfig)

    if args.context:
        config_kwargs["kubeconfig_context"] = args.context

    if args.sequential_fetch:
        config_kwargs["concurrent_fetch"] = False

    if args.request_timeout is not None:
        config_kwargs["request_timeout_seconds"] = args.request_timeout

    if args.inventory_file:
        config_kwargs["inventory_file"] = Path(args.inventory_file)

    if args.log_level:
        config_kwargs["log_level"] = LogLevel(args.log_level)

    return ClusterInsightsConfig(**config_kwargs)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = build_config(args)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(f"Starting Cluster Insights MCP server v{__version__}")

    try:
        warnings = config.validate_auth_config()
        for warning in warnings:
            logger.warning(warning)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    from cluster_insights_mcp.server import create_server

    mcp = create_server(config)

    if config.transport == TransportMode.STDIO:
        logger.info("Running with stdio transport")
        mcp.run(transport="stdio")
    elif config.transport == TransportMode.SSE:
        logger.info(f"Running with SSE transport on {config.host}:{config.port}")
        mcp.run(transport="sse")
    elif config.transport == TransportMode.STREAMABLE_HTTP:
        logger.info(f"Running with streamable-http transport on {config.host}:{config.port}")
        mcp.run(transport="streamable-http")

    return 0


if __name__ == "__main__":
    sys.exit(main())
