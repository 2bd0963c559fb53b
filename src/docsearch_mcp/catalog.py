"""Builds the document repository from the remote documentation index."""

import logging

import httpx

from docsearch_mcp.config import Config
from docsearch_mcp.corpus.loader import DocumentLoader, MarkdownFetcher
from docsearch_mcp.corpus.parser import index_host, parse_llms_text, raw_doc_from_url
from docsearch_mcp.search.repository import DocsRepository

logger = logging.getLogger(__name__)


def build_repository(config: Config, fetcher: MarkdownFetcher | None = None) -> DocsRepository:
    """
    Fetch the index, load every listed document and the common documents.

    Common documents are numbered after the searchable ones so ids stay
    unique. If the index itself cannot be fetched an empty repository is
    returned and the server still starts.

    Args:
        config: Configuration with index URL, common URLs and fetch settings
        fetcher: Fetcher to use (a new one, closed afterwards, if None)
    """
    owns_fetcher = fetcher is None
    if fetcher is None:
        fetcher = MarkdownFetcher(timeout=config.fetch_timeout)

    try:
        try:
            index_text = fetcher.fetch_text(config.index_url, no_cache=True)
        except httpx.HTTPError as e:
            logger.error("Failed to fetch documentation index %s: %s", config.index_url, e)
            return DocsRepository([])

        raw_docs = parse_llms_text(index_text, index_host(config.index_url))
        logger.info("Index %s lists %d documents", config.index_url, len(raw_docs))

        documents = DocumentLoader(
            raw_docs, fetcher, start_id=0, max_workers=config.fetch_workers
        ).load()

        common_raw = [raw_doc_from_url(url) for url in config.common_urls]
        common_documents = DocumentLoader(
            common_raw, fetcher, start_id=len(documents), max_workers=config.fetch_workers
        ).load()

        return DocsRepository(documents, common_documents)
    finally:
        if owns_fetcher:
            fetcher.close()
