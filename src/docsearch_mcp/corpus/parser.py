"""Parsers for the documentation index and markdown document metadata."""

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

import yaml

from docsearch_mcp.corpus.models import Category, DocumentMetadata, RawDoc

logger = logging.getLogger(__name__)


@dataclass
class FrontmatterData:
    """Parsed frontmatter data."""

    title: str | None = None
    description: str | None = None
    keywords: list[str] | None = None
    category: str | None = None
    raw: dict | None = None


# Technical terms picked up as keywords wherever they appear in a source text
TECHNICAL_TERMS = (
    "api",
    "jwt",
    "token",
    "cookie",
    "auth",
    "login",
    "signup",
    "react",
    "vue",
    "nextjs",
    "javascript",
    "typescript",
    "cors",
    "http",
    "https",
    "json",
    "fetch",
    "axios",
    "express",
    "security",
    "encryption",
    "validation",
    "error",
    "response",
)

TITLE_SCAN_LINES = 20
DESCRIPTION_SCAN_LINES = 30
MIN_DESCRIPTION_CHARS = 20
MIN_KEYWORD_CHARS = 3
MAX_KEYWORD_CHARS = 50

CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")
INLINE_CODE_PATTERN = re.compile(r"`([^`]+)`")
HEADING_LINE_PATTERN = re.compile(r"^#{1,6}\s")
NON_WORD_PATTERN = re.compile(r"[^\w\s가-힣]")
INDEX_LINK_PATTERN = re.compile(r"\[([^\]]*)\]\(([^)\s]+)\)")


def parse_frontmatter(content: str, url: str = "") -> tuple[FrontmatterData, str]:
    """
    Parse YAML frontmatter from markdown content.

    Args:
        content: The full markdown content
        url: Source URL (for log messages only)

    Returns:
        Tuple of (FrontmatterData, content_without_frontmatter)
    """
    data = FrontmatterData()
    body = content

    if content.startswith("---"):
        parts = content.split("---", 2)
        if len(parts) >= 3:
            try:
                raw = yaml.safe_load(parts[1])
                if isinstance(raw, dict):
                    data.raw = raw
                    title = raw.get("title")
                    if title is not None:
                        data.title = str(title)
                    description = raw.get("description")
                    if description is not None:
                        data.description = str(description)
                    category = raw.get("category")
                    if category is not None:
                        data.category = str(category)

                    keywords = raw.get("keywords")
                    if isinstance(keywords, list):
                        data.keywords = [str(k) for k in keywords]
                    elif isinstance(keywords, str):
                        data.keywords = [k.strip() for k in keywords.split(",") if k.strip()]

                body = parts[2].lstrip("\n")
            except yaml.YAMLError as e:
                logger.debug("Invalid YAML frontmatter in %s: %s", url, e)

    return data, body


def strip_frontmatter(content: str) -> str:
    """Remove YAML frontmatter from content."""
    if content.startswith("---"):
        parts = content.split("---", 2)
        if len(parts) >= 3:
            return parts[2].lstrip("\n")
    return content


def category_from_url(url: str) -> Category:
    """Infer the category from a /<category>/ segment in the URL path."""
    try:
        path = urlparse(url).path
    except ValueError:
        return Category.UNKNOWN

    for category in Category:
        if category is Category.UNKNOWN:
            continue
        if f"/{category.value}/" in path:
            return category
    return Category.UNKNOWN


def extract_title(lines: list[str]) -> str:
    for line in lines[:TITLE_SCAN_LINES]:
        if line.startswith("# "):
            return line[2:].strip()
    return ""


def extract_description(lines: list[str]) -> str:
    for line in lines[:DESCRIPTION_SCAN_LINES]:
        stripped = line.strip()
        if (
            stripped
            and not line.startswith("#")
            and not line.startswith("```")
            and len(line) > MIN_DESCRIPTION_CHARS
        ):
            return stripped
    return ""


def extract_code_blocks(content: str) -> str:
    return " ".join(CODE_BLOCK_PATTERN.findall(content))


def extract_headings(content: str) -> str:
    headings = [
        HEADING_LINE_PATTERN.sub("", line).strip()
        for line in content.split("\n")
        if HEADING_LINE_PATTERN.match(line)
    ]
    return " ".join(headings)


def extract_keywords_from_text(text: str) -> list[str]:
    """Split text into lower-cased words (> 2 chars) plus known technical terms."""
    clean = CODE_BLOCK_PATTERN.sub("", text)
    clean = INLINE_CODE_PATTERN.sub(r"\1", clean)
    clean = NON_WORD_PATTERN.sub(" ", clean)

    words = [w.lower() for w in clean.split() if len(w) > 2]
    clean_lower = clean.lower()
    found = [term for term in TECHNICAL_TERMS if term in clean_lower]
    return words + found


def extract_keywords_from_url(url: str) -> list[str]:
    try:
        path = urlparse(url).path
    except ValueError:
        return []
    return [
        re.sub(r"[-_]", " ", part).lower()
        for part in path.split("/")
        if part
    ]


def extract_metadata(content: str, url: str) -> DocumentMetadata:
    """
    Derive document metadata from markdown content and its URL.

    Frontmatter fields win; otherwise the title is the first H1, the
    description the first prose line, and the category comes from the URL.
    """
    frontmatter, body = parse_frontmatter(content, url)
    lines = body.split("\n")

    title = frontmatter.title or extract_title(lines)
    description = frontmatter.description or extract_description(lines)

    sources = [
        title,
        description,
        # Fences dropped, otherwise the code block pattern strips the code itself
        extract_code_blocks(body).replace("```", " "),
        extract_headings(body),
    ]
    keywords: list[str] = list(frontmatter.keywords or [])
    for source in sources:
        if source:
            keywords.extend(extract_keywords_from_text(source))
    keywords.extend(extract_keywords_from_url(url))

    unique = [
        k
        for k in dict.fromkeys(keywords)
        if MIN_KEYWORD_CHARS <= len(k) < MAX_KEYWORD_CHARS
    ]

    if frontmatter.category:
        category = Category.parse(frontmatter.category)
    else:
        category = category_from_url(url)

    return DocumentMetadata(
        title=title or "Untitled",
        description=description or "",
        keywords=unique,
        category=category,
    )


def index_host(index_url: str) -> str:
    """Return scheme://host of the index URL, used to filter index links."""
    parsed = urlparse(index_url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


def parse_llms_text(text: str, link_prefix: str = "") -> list[RawDoc]:
    """
    Parse an llms.txt-style index.

    Each line of the form ``- [Title](url): description`` whose url starts
    with link_prefix becomes a RawDoc. Other lines are ignored.
    """
    docs: list[RawDoc] = []
    for line in text.split("\n"):
        match = INDEX_LINK_PATTERN.search(line)
        if match is None:
            continue
        title, link = match.group(1).strip(), match.group(2).strip()
        if link_prefix and not link.startswith(link_prefix):
            continue

        description = ""
        rest = line[match.end():]
        if rest.startswith(":"):
            description = rest[1:].strip()

        docs.append(
            RawDoc(
                text=line.strip(),
                title=title,
                link=link,
                description=description,
                category=category_from_url(link),
            )
        )
    return docs


def raw_doc_from_url(url: str) -> RawDoc:
    """Build a RawDoc for a document known only by URL (title from the filename)."""
    filename = url.rstrip("/").split("/")[-1] or "unknown.md"
    title = filename.removesuffix(".md").replace("-", " ")
    return RawDoc(
        text=f"[{title}]({url})",
        title=title,
        link=url,
        description="",
        category=category_from_url(url),
    )
