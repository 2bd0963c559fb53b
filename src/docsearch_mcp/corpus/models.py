"""Data models for the document corpus."""

from dataclasses import dataclass, field
from enum import Enum


class Category(str, Enum):
    """Closed set of document categories.

    Anything the loader cannot place degrades to UNKNOWN.
    """

    API = "api"
    TEMPLATES = "templates"
    SECURITY = "security"
    EXAMPLES = "examples"
    FRAMEWORKS = "frameworks"
    DEV = "dev"
    CONFIG = "config"
    ERRORS = "errors"
    INTEGRATION = "integration"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: "str | Category | None") -> "Category":
        """Coerce a raw value to a Category, falling back to UNKNOWN."""
        if isinstance(value, Category):
            return value
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass
class DocumentMetadata:
    """Metadata supplied by the loader for one document."""

    title: str = ""
    description: str = ""
    keywords: list[str] = field(default_factory=list)
    category: Category = Category.UNKNOWN


@dataclass
class MarkdownDocument:
    """A fetched markdown document with its extracted metadata."""

    content: str
    metadata: DocumentMetadata
    url: str


@dataclass
class RawDoc:
    """One entry parsed from the documentation index (llms.txt)."""

    text: str
    title: str
    link: str
    description: str = ""
    category: Category = Category.UNKNOWN


@dataclass(frozen=True)
class Chunk:
    """A heading-contextualized passage extracted from a document."""

    document_id: int
    chunk_index: int
    text: str  # raw_text prefixed with "# <nearest heading>"
    raw_text: str
    header_path: tuple[str, ...]
    word_count: int
    estimated_tokens: int
    category: Category = Category.UNKNOWN

    @property
    def heading(self) -> str:
        """Nearest heading title for this passage."""
        return self.header_path[-1] if self.header_path else ""

    def to_dict(self) -> dict:
        return {
            "document_id": self.document_id,
            "chunk_index": self.chunk_index,
            "text": self.text,
            "header_path": list(self.header_path),
            "word_count": self.word_count,
            "estimated_tokens": self.estimated_tokens,
            "category": self.category.value,
        }
