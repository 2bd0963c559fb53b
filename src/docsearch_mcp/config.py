"""Configuration module for docsearch-mcp.

Loads configuration from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass, field

DEFAULT_INDEX_URL = "https://docs.aiapp.link/llms.txt"

DEFAULT_COMMON_URLS = (
    "https://docs.aiapp.link/common/security.md",
    "https://docs.aiapp.link/common/errors.md",
    "https://docs.aiapp.link/common/state-management.md",
)

TRANSPORTS = ("stdio", "sse")


@dataclass
class Config:
    """Application configuration."""

    index_url: str = DEFAULT_INDEX_URL
    common_urls: tuple[str, ...] = field(default_factory=lambda: DEFAULT_COMMON_URLS)
    project_id: str | None = None
    transport: str = "stdio"
    port: int = 8080
    fetch_timeout: float = 10.0
    fetch_workers: int = 8

    @classmethod
    def from_env(
        cls,
        project_id_override: str | None = None,
        index_url_override: str | None = None,
        transport_override: str | None = None,
    ) -> "Config":
        """Load configuration from environment variables.

        Args:
            project_id_override: If provided, overrides DOCS_PROJECT_ID.
            index_url_override: If provided, overrides DOCS_INDEX_URL.
            transport_override: If provided, overrides DOCS_TRANSPORT.
        """
        index_url = index_url_override or os.getenv("DOCS_INDEX_URL", DEFAULT_INDEX_URL)
        if not index_url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid DOCS_INDEX_URL '{index_url}': must be an http(s) URL")

        common_env = os.getenv("DOCS_COMMON_URLS")
        if common_env is None:
            common_urls = DEFAULT_COMMON_URLS
        else:
            common_urls = tuple(u.strip() for u in common_env.split(",") if u.strip())

        # CLI flag takes precedence over env var
        project_id = project_id_override or os.getenv("DOCS_PROJECT_ID") or None

        transport = (transport_override or os.getenv("DOCS_TRANSPORT", "stdio")).lower()
        if transport not in TRANSPORTS:
            raise ValueError(
                f"Invalid DOCS_TRANSPORT '{transport}': expected one of {', '.join(TRANSPORTS)}"
            )

        port_str = os.getenv("DOCS_PORT", "8080")
        try:
            port = int(port_str)
            if not 1 <= port <= 65535:
                raise ValueError(f"Port must be between 1 and 65535, got {port}")
        except ValueError as e:
            raise ValueError(f"Invalid DOCS_PORT value '{port_str}': {e}") from e

        timeout_str = os.getenv("DOCS_FETCH_TIMEOUT", "10.0")
        try:
            fetch_timeout = float(timeout_str)
            if fetch_timeout <= 0:
                raise ValueError(f"Timeout must be > 0, got {fetch_timeout}")
        except ValueError as e:
            raise ValueError(f"Invalid DOCS_FETCH_TIMEOUT value '{timeout_str}': {e}") from e

        workers_str = os.getenv("DOCS_FETCH_WORKERS", "8")
        try:
            fetch_workers = int(workers_str)
            if fetch_workers < 1:
                raise ValueError(f"Workers must be >= 1, got {fetch_workers}")
        except ValueError as e:
            raise ValueError(f"Invalid DOCS_FETCH_WORKERS value '{workers_str}': {e}") from e

        return cls(
            index_url=index_url,
            common_urls=common_urls,
            project_id=project_id,
            transport=transport,
            port=port,
            fetch_timeout=fetch_timeout,
            fetch_workers=fetch_workers,
        )
