"""Chunking logic for splitting documents into heading-annotated passages."""

import math
import re
from dataclasses import dataclass

from docsearch_mcp.corpus.models import Category, Chunk

# Token budget per chunk (context header included)
MAX_CHUNK_TOKENS = 2000

# Sections shorter than this (trimmed) carry no useful context
MIN_SECTION_CHARS = 100

# Characters per token for each script class
LATIN_CHARS_PER_TOKEN = 4.0
CJK_CHARS_PER_TOKEN = 1.5
OTHER_CHARS_PER_TOKEN = 2.0

LATIN_PATTERN = re.compile(r"[A-Za-z0-9À-ɏ]")
# Hangul jamo, kana, compatibility jamo, CJK ideographs, Hangul syllables
CJK_PATTERN = re.compile(
    r"[ᄀ-ᇿ぀-ヿ㄰-㆏㐀-䶿一-鿿가-힣]"
)
WHITESPACE_PATTERN = re.compile(r"\s")

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
FENCE_MARKERS = ("```", "~~~")
MAX_HEADING_LEVEL = 6


@dataclass
class Section:
    """Text under one heading, with the path of headings above it."""

    header_path: tuple[str, ...]
    content: str


def estimate_tokens(text: str) -> int:
    """Estimate the token count of text.

    Latin letters/digits, CJK characters and everything else (whitespace
    excluded) are counted separately, divided by their own ratio and summed.
    """
    if not text:
        return 0
    latin = len(LATIN_PATTERN.findall(text))
    cjk = len(CJK_PATTERN.findall(text))
    whitespace = len(WHITESPACE_PATTERN.findall(text))
    other = len(text) - latin - cjk - whitespace
    estimate = (
        latin / LATIN_CHARS_PER_TOKEN
        + cjk / CJK_CHARS_PER_TOKEN
        + other / OTHER_CHARS_PER_TOKEN
    )
    return math.ceil(estimate)


def format_chunk_text(heading: str, raw_text: str) -> str:
    """Prefix a passage with its nearest heading as a context line."""
    return f"# {heading}\n\n{raw_text}"


def _collapse_path(path: list[str]) -> tuple[str, ...]:
    """Drop empty entries and consecutive duplicates from a header path."""
    collapsed: list[str] = []
    for title in path:
        if title and (not collapsed or collapsed[-1] != title):
            collapsed.append(title)
    return tuple(collapsed)


def split_by_headings(content: str, title: str) -> list[Section]:
    """
    Split content on markdown heading lines (# through ######).

    Headings inside fenced code blocks are ignored. Each section keeps its own
    heading line. The header path starts at the document title; a level with
    no explicit heading inherits the one above it.
    """
    stack: list[str] = [title] + [""] * MAX_HEADING_LEVEL
    current_path: tuple[str, ...] = _collapse_path([title])
    buffer: list[str] = []
    sections: list[Section] = []
    in_fence = False

    def flush() -> None:
        text = "\n".join(buffer).strip()
        if text:
            sections.append(Section(header_path=current_path, content=text))

    for line in content.split("\n"):
        if line.lstrip().startswith(FENCE_MARKERS):
            in_fence = not in_fence
            buffer.append(line)
            continue

        match = None if in_fence else HEADING_PATTERN.match(line)
        if match is None:
            buffer.append(line)
            continue

        flush()
        level = len(match.group(1))
        stack[level] = match.group(2).strip()
        for deeper in range(level + 1, MAX_HEADING_LEVEL + 1):
            stack[deeper] = ""
        for parent in range(1, level):
            if not stack[parent]:
                stack[parent] = stack[parent - 1]
        current_path = _collapse_path(stack[: level + 1])
        buffer = [line]

    flush()
    return sections


def _fits(heading: str, raw_text: str, max_tokens: int) -> bool:
    return estimate_tokens(format_chunk_text(heading, raw_text)) <= max_tokens


def split_by_paragraphs(content: str, heading: str, max_tokens: int) -> list[str]:
    """Split content on blank lines, packing paragraphs up to max_tokens.

    A single paragraph over the budget is kept whole.
    """
    paragraphs = re.split(r"\n\s*\n", content)
    pieces: list[str] = []
    current: list[str] = []

    for para in paragraphs:
        para = para.strip()
        if not para:
            continue

        if current and _fits(heading, "\n\n".join(current + [para]), max_tokens):
            current.append(para)
            continue

        if current:
            pieces.append("\n\n".join(current))
        current = [para]

    if current:
        pieces.append("\n\n".join(current))

    return pieces


def chunk_content(
    content: str,
    title: str,
    document_id: int = 0,
    category: Category = Category.UNKNOWN,
    max_tokens: int = MAX_CHUNK_TOKENS,
) -> list[Chunk]:
    """
    Chunk a document's content.

    Rules:
    1. A document within budget becomes one chunk headed by its title
    2. Otherwise split by headings and drop sections under MIN_SECTION_CHARS
    3. Pack consecutive sections greedily while the chunk stays within budget
    4. A section over budget on its own is split by paragraphs; pieces under
       MIN_SECTION_CHARS are dropped
    """
    body = content.strip()
    root = title or "Untitled"

    passages: list[tuple[tuple[str, ...], str]] = []
    if _fits(root, body, max_tokens):
        passages.append(((root,), body))
    else:
        sections = [
            s
            for s in split_by_headings(body, root)
            if len(s.content) >= MIN_SECTION_CHARS
        ]

        current_path: tuple[str, ...] = (root,)
        current: list[str] = []

        for section in sections:
            heading = section.header_path[-1]
            if _fits(heading, section.content, max_tokens):
                if current and _fits(
                    current_path[-1], "\n\n".join(current + [section.content]), max_tokens
                ):
                    current.append(section.content)
                    continue
                if current:
                    passages.append((current_path, "\n\n".join(current)))
                current_path, current = section.header_path, [section.content]
                continue

            # Oversized section: flush, then split it on its own
            if current:
                passages.append((current_path, "\n\n".join(current)))
                current = []
            # Greedy packing leaves no neighbour with room for a short piece
            for piece in split_by_paragraphs(section.content, heading, max_tokens):
                if len(piece) >= MIN_SECTION_CHARS:
                    passages.append((section.header_path, piece))

        if current:
            passages.append((current_path, "\n\n".join(current)))

        if not passages:
            passages.append(((root,), body))

    chunks: list[Chunk] = []
    for index, (path, raw_text) in enumerate(passages):
        text = format_chunk_text(path[-1], raw_text)
        chunks.append(
            Chunk(
                document_id=document_id,
                chunk_index=index,
                text=text,
                raw_text=raw_text,
                header_path=path,
                word_count=len(raw_text.split()),
                estimated_tokens=estimate_tokens(text),
                category=category,
            )
        )
    return chunks
