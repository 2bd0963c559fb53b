"""
Corpus module for docsearch-mcp.

Turns fetched markdown into immutable Document entities: metadata extraction,
keyword sets and heading-annotated chunks. Everything here is built once at
load time and never mutated afterwards.
"""

from docsearch_mcp.corpus.chunker import chunk_content, estimate_tokens
from docsearch_mcp.corpus.document import Document
from docsearch_mcp.corpus.loader import DocumentLoader, MarkdownFetcher
from docsearch_mcp.corpus.models import (
    Category,
    Chunk,
    DocumentMetadata,
    MarkdownDocument,
    RawDoc,
)
from docsearch_mcp.corpus.parser import extract_metadata, parse_llms_text

__all__ = [
    "Category",
    "Chunk",
    "Document",
    "DocumentLoader",
    "DocumentMetadata",
    "MarkdownDocument",
    "MarkdownFetcher",
    "RawDoc",
    "chunk_content",
    "estimate_tokens",
    "extract_metadata",
    "parse_llms_text",
]
