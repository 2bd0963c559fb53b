"""Shared fixtures for docsearch-mcp tests."""

import pytest

from docsearch_mcp.corpus.chunker import MAX_CHUNK_TOKENS
from docsearch_mcp.corpus.document import Document
from docsearch_mcp.corpus.models import Category, DocumentMetadata, MarkdownDocument


@pytest.fixture
def make_document():
    """Factory building a Document from plain values."""

    def _make(
        document_id: int,
        content: str,
        title: str = "Doc",
        description: str = "",
        keywords: list[str] | None = None,
        category: Category | str = Category.UNKNOWN,
        url: str | None = None,
        max_chunk_tokens: int = MAX_CHUNK_TOKENS,
    ) -> Document:
        metadata = DocumentMetadata(
            title=title,
            description=description,
            keywords=list(keywords or []),
            category=Category.parse(category),
        )
        source = MarkdownDocument(
            content=content,
            metadata=metadata,
            url=url or f"https://docs.example.com/doc-{document_id}.md",
        )
        return Document(document_id, source, max_chunk_tokens=max_chunk_tokens)

    return _make
