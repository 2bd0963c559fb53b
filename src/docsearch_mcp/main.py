"""Main entry point for docsearch-mcp MCP server."""

import argparse
import logging
import sys

from fastmcp import FastMCP

from docsearch_mcp.catalog import build_repository
from docsearch_mcp.config import Config
from docsearch_mcp.resources import register_resources
from docsearch_mcp.search.repository import DocsRepository
from docsearch_mcp.tools import register_tools

logger = logging.getLogger(__name__)


def create_server(config: Config, repository: DocsRepository | None = None) -> FastMCP:
    """Create and configure the MCP server with all components.

    Args:
        config: Configuration instance with all settings.
        repository: Preloaded repository; fetched from config.index_url if None.
    """
    mcp = FastMCP(
        name="docsearch-mcp",
        instructions=(
            "docsearch-mcp searches a markdown documentation corpus. Use "
            "search_documents with a few keywords to find relevant documents, then "
            "get_document_by_id to read one in full. get_implementation_guide "
            "returns complete documents for a feature and framework."
        ),
    )

    if repository is None:
        logger.info("Loading documentation from %s", config.index_url)
        repository = build_repository(config)
        logger.info(
            "Loaded %d searchable and %d common documents",
            repository.total_documents(),
            len(repository.common_documents),
        )

    logger.info("Registering resources...")
    register_resources(mcp, repository)

    logger.info("Registering tools...")
    register_tools(mcp, repository, config)

    logger.info("Server configured successfully")
    return mcp


def main() -> None:
    """Main function - starts the MCP server."""
    # Configure logging here to avoid side effects on import
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        # stdout carries the stdio transport
        stream=sys.stderr,
    )

    parser = argparse.ArgumentParser(description="docsearch-mcp - MCP server for markdown docs")
    parser.add_argument(
        "--project-id",
        help="Project id substituted for [PROJECT_ID] in documents",
    )
    parser.add_argument(
        "--index-url",
        help="URL of the llms.txt style documentation index",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        help="MCP transport (default: stdio)",
    )
    args = parser.parse_args()

    try:
        config = Config.from_env(
            project_id_override=args.project_id,
            index_url_override=args.index_url,
            transport_override=args.transport,
        )
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    # Print startup banner
    logger.info("=" * 50)
    logger.info("docsearch-mcp starting...")
    logger.info("  INDEX_URL:  %s", config.index_url)
    logger.info("  PROJECT_ID: %s", config.project_id or "not set")
    logger.info("  TRANSPORT:  %s", config.transport)
    logger.info("=" * 50)

    try:
        mcp = create_server(config)
        if config.transport == "sse":
            logger.info("Starting MCP server on port %s...", config.port)
            mcp.run(transport="sse", host="0.0.0.0", port=config.port)
        else:
            mcp.run(transport="stdio")
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)
    except Exception:
        logger.exception("Server error")
        sys.exit(1)


if __name__ == "__main__":
    main()
