"""Fetching and loading documents into Document entities."""

import logging
from concurrent.futures import ThreadPoolExecutor

import httpx

from docsearch_mcp.corpus.document import Document
from docsearch_mcp.corpus.models import Category, MarkdownDocument, RawDoc
from docsearch_mcp.corpus.parser import extract_metadata

logger = logging.getLogger(__name__)

USER_AGENT = "docsearch-mcp"

# Timeout for a single document fetch
FETCH_TIMEOUT = 10.0  # seconds

# Max concurrent document fetches
MAX_CONCURRENT_FETCHES = 8

NO_CACHE_HEADERS = {
    "cache-control": "no-cache, no-store, must-revalidate",
    "pragma": "no-cache",
}


class MarkdownFetcher:
    """Fetches markdown over HTTP and extracts its metadata.

    The underlying httpx.Client is safe to share between loader threads.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float = FETCH_TIMEOUT,
        user_agent: str = USER_AGENT,
    ):
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            headers={"user-agent": user_agent},
            follow_redirects=True,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "MarkdownFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def fetch_text(self, url: str, no_cache: bool = False) -> str:
        """GET a URL and return the body text.

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses
        """
        headers = NO_CACHE_HEADERS if no_cache else None
        response = self._client.get(url, headers=headers)
        response.raise_for_status()
        return response.text

    def fetch(self, url: str) -> MarkdownDocument:
        """Fetch a markdown document and extract its metadata."""
        content = self.fetch_text(url)
        return MarkdownDocument(
            content=content,
            metadata=extract_metadata(content, url),
            url=url,
        )


class DocumentLoader:
    """
    Loads a list of index entries into Documents.

    Fetches run concurrently. A failed fetch is logged and the entry is
    skipped; the rest of the corpus still loads. Ids are assigned in index
    order once all fetches complete, starting at start_id.
    """

    def __init__(
        self,
        raw_docs: list[RawDoc],
        fetcher: MarkdownFetcher,
        start_id: int = 0,
        max_workers: int = MAX_CONCURRENT_FETCHES,
    ):
        self._raw_docs = raw_docs
        self._fetcher = fetcher
        self._start_id = start_id
        self._max_workers = max(1, max_workers)
        self._documents: dict[str, Document] = {}

    def load(self) -> list[Document]:
        """Fetch every entry and build the documents.

        Returns:
            Documents in index order (duplicates and failures omitted).
        """
        unique: dict[str, RawDoc] = {}
        for raw in self._raw_docs:
            if raw.link and raw.link not in unique:
                unique[raw.link] = raw

        if not unique:
            return []

        entries = list(unique.values())
        with ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(entries)),
            thread_name_prefix="doc-fetch",
        ) as executor:
            fetched = list(executor.map(self._fetch_one, entries))

        self._documents = {}
        next_id = self._start_id
        for raw, source in zip(entries, fetched):
            if source is None:
                continue
            self._documents[raw.link] = Document(
                next_id, source, category=_resolve_category(raw, source)
            )
            next_id += 1

        failed = len(entries) - len(self._documents)
        if failed:
            logger.warning("Loaded %d documents, %d failed", len(self._documents), failed)
        else:
            logger.info("Loaded %d documents", len(self._documents))
        return self.documents

    @property
    def documents(self) -> list[Document]:
        return list(self._documents.values())

    def _fetch_one(self, raw: RawDoc) -> MarkdownDocument | None:
        try:
            source = self._fetcher.fetch(raw.link)
        except (httpx.HTTPError, UnicodeDecodeError) as e:
            logger.warning("Failed to fetch document from %s: %s", raw.link, e)
            return None

        # The index entry carries a better title/description than heuristics
        if raw.title and source.metadata.title == "Untitled":
            source.metadata.title = raw.title
        if raw.description and not source.metadata.description:
            source.metadata.description = raw.description
        return source


def _resolve_category(raw: RawDoc, source: MarkdownDocument) -> Category:
    """Prefer the index entry's category, then the document's own."""
    if raw.category is not Category.UNKNOWN:
        return raw.category
    return source.metadata.category
