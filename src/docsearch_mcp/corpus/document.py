"""Document entity: one fetched document with its keywords and chunks."""

import re
from functools import lru_cache

from docsearch_mcp.corpus.chunker import MAX_CHUNK_TOKENS, chunk_content
from docsearch_mcp.corpus.models import Category, Chunk, MarkdownDocument
from docsearch_mcp.corpus.parser import strip_frontmatter

# Domain vocabulary added to a document's keywords when present in its content
DOMAIN_TERMS = (
    "authentication",
    "auth",
    "login",
    "signup",
    "register",
    "user",
    "token",
    "jwt",
    "cookie",
    "session",
    "api",
    "endpoint",
    "request",
    "response",
    "security",
    "validation",
    "error",
    "react",
    "vue",
    "nextjs",
    "javascript",
    "typescript",
)

# Chunk scoring boosts
HEADING_CHUNK_BOOST = 2.0
CODE_CHUNK_BOOST = 1.5
MAX_RELEVANT_CHUNKS = 3


@lru_cache(maxsize=1024)
def _word_pattern(term: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(term)}\b")


def count_term(text: str, term: str) -> int:
    """Count whole-word occurrences of a lower-cased term in lower-cased text."""
    if not term:
        return 0
    return len(_word_pattern(term).findall(text))


def build_keywords(
    metadata_keywords: list[str],
    title: str,
    description: str,
    category: Category,
    content: str,
) -> frozenset[str]:
    """Build the normalized keyword set for a document."""
    keywords: set[str] = set()

    for keyword in metadata_keywords:
        normalized = keyword.strip().lower()
        if normalized:
            keywords.add(normalized)

    for word in f"{title} {description}".lower().split():
        if len(word) > 2:
            keywords.add(word)

    keywords.add(category.value)

    content_lower = content.lower()
    keywords.update(term for term in DOMAIN_TERMS if term in content_lower)

    return frozenset(keywords)


def score_chunk(chunk_text: str, query_terms: list[str]) -> float:
    """Score a passage by query-term occurrences.

    The count is doubled when the passage carries a heading marker and
    multiplied by 1.5 when it contains a fenced code block.
    """
    text_lower = chunk_text.lower()
    score = float(sum(count_term(text_lower, term.lower()) for term in query_terms))
    if "#" in chunk_text:
        score *= HEADING_CHUNK_BOOST
    if "```" in chunk_text:
        score *= CODE_CHUNK_BOOST
    return score


class Document:
    """
    A document in the in-memory index.

    Immutable after construction: keywords and chunks are computed once.
    The id is the only handle used to look documents up and to map ranking
    results back to them.
    """

    def __init__(
        self,
        document_id: int,
        source: MarkdownDocument,
        category: Category | str | None = None,
        keywords: frozenset[str] | None = None,
        max_chunk_tokens: int = MAX_CHUNK_TOKENS,
    ):
        """
        Build a document.

        Args:
            document_id: Sequential id assigned by the loader
            source: Fetched content, metadata and url
            category: Overrides the metadata category when given
            keywords: Precomputed keyword set (built from metadata if None)
            max_chunk_tokens: Token budget per chunk
        """
        self._id = document_id
        self._source = source
        self._category = Category.parse(
            category if category is not None else source.metadata.category
        )
        self._content_lower = source.content.lower()
        if keywords is None:
            keywords = build_keywords(
                source.metadata.keywords,
                source.metadata.title,
                source.metadata.description,
                self._category,
                source.content,
            )
        self._keywords = frozenset(keywords)
        self._chunks = tuple(
            chunk_content(
                strip_frontmatter(source.content),
                source.metadata.title,
                document_id=document_id,
                category=self._category,
                max_tokens=max_chunk_tokens,
            )
        )

    def __repr__(self) -> str:
        return f"Document(id={self._id}, title={self.title!r}, category={self._category.value})"

    @property
    def id(self) -> int:
        return self._id

    @property
    def category(self) -> Category:
        return self._category

    @property
    def title(self) -> str:
        return self._source.metadata.title

    @property
    def description(self) -> str:
        return self._source.metadata.description

    @property
    def url(self) -> str:
        return self._source.url

    @property
    def content(self) -> str:
        return self._source.content

    @property
    def content_length(self) -> int:
        return len(self._source.content)

    @property
    def keywords(self) -> frozenset[str]:
        return self._keywords

    @property
    def chunks(self) -> tuple[Chunk, ...]:
        return self._chunks

    def has_keyword(self, keyword: str) -> bool:
        """Check the keyword set, then fall back to a content substring test."""
        normalized = keyword.strip().lower()
        if not normalized:
            return False
        return normalized in self._keywords or normalized in self._content_lower

    def term_frequency(self, term: str) -> int:
        """Count whole-word matches of term in the content (case-insensitive)."""
        return count_term(self._content_lower, term.strip().lower())

    def relevant_chunks(
        self, query_terms: list[str], max_chunks: int = MAX_RELEVANT_CHUNKS
    ) -> list[Chunk]:
        """Return the best-matching chunks, highest score first.

        Chunks with no query term are skipped; ties keep reading order.
        """
        scored = [
            (score_chunk(chunk.text, query_terms), chunk) for chunk in self._chunks
        ]
        scored = [item for item in scored if item[0] > 0]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [chunk for _, chunk in scored[:max_chunks]]

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "category": self._category.value,
            "keywords": sorted(self._keywords),
        }
