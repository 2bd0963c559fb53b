"""
BM25 scoring over the in-memory document set.

Formula, per query term with tf > 0:

    idf = ln((N - df + 0.5) / (df + 0.5))
    score += idf * tf * (k1 + 1) / (tf + k1 * (1 - b + b * dl / avgdl))

Where:
    tf = whole-word occurrences of the term in the document content
    df = documents containing the term (from the document-frequency index, 1 if absent)
    N = documents in the scored set
    dl = content length in characters
    avgdl = fixed 1000 characters (an approximation, not the corpus average)

The raw idf goes negative for terms in more than half the documents, which
would drop every document that matches only common terms. It is floored at
IDF_FLOOR so any match still scores above zero.
"""

import logging
import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from docsearch_mcp.corpus.document import Document
from docsearch_mcp.search.modes import BM25_PARAMS, BM25Params, SearchMode

logger = logging.getLogger(__name__)

# Approximate average document length in characters
AVG_DOC_LENGTH = 1000.0

IDF_FLOOR = 0.01

# Anything outside word characters, whitespace and Hangul
NON_TOKEN_PATTERN = re.compile(r"[^\w\s가-힣]")
MIN_QUERY_TERM_LENGTH = 2
MIN_INDEX_TERM_LENGTH = 3


@dataclass(frozen=True)
class BM25Result:
    """Raw BM25 score for one document."""

    id: int
    score: float


def normalize_query(query: str) -> list[str]:
    """
    Normalize and tokenize a raw query.

    Case-folds, replaces characters outside word/whitespace/Hangul with
    spaces, splits on whitespace and drops single-character tokens.
    Duplicates are removed, first occurrence wins.
    """
    if not isinstance(query, str):
        return []
    normalized = NON_TOKEN_PATTERN.sub(" ", query.lower())
    terms = [t for t in normalized.split() if len(t) >= MIN_QUERY_TERM_LENGTH]
    return list(dict.fromkeys(terms))


def index_terms(document: Document) -> set[str]:
    """Distinct terms a document contributes to the document-frequency index."""
    terms = {keyword.lower() for keyword in document.keywords}
    words = NON_TOKEN_PATTERN.sub(" ", document.content.lower()).split()
    terms.update(w for w in words if len(w) >= MIN_INDEX_TERM_LENGTH)
    return terms


def build_document_frequency(documents: Iterable[Document]) -> dict[str, int]:
    """Map each term to the number of documents containing it."""
    frequency: dict[str, int] = {}
    for document in documents:
        for term in index_terms(document):
            frequency[term] = frequency.get(term, 0) + 1
    return frequency


class BM25Calculator:
    """
    Scores documents against query terms.

    Works over a fixed document set and a prebuilt document-frequency index.
    Term frequencies are computed per query, not cached. Holds no mutable
    state; one instance can serve concurrent queries.
    """

    def __init__(
        self,
        documents: Sequence[Document],
        document_frequency: dict[str, int],
        avg_doc_length: float = AVG_DOC_LENGTH,
    ):
        self._documents = tuple(documents)
        self._document_frequency = document_frequency
        self._avg_doc_length = avg_doc_length

    @property
    def total_documents(self) -> int:
        return len(self._documents)

    def idf(self, term: str) -> float:
        """Inverse document frequency of a lower-cased term."""
        df = self._document_frequency.get(term) or 1
        n = len(self._documents)
        ratio = (n - df + 0.5) / (df + 0.5)
        if ratio <= 0:
            return IDF_FLOOR
        return max(math.log(ratio), IDF_FLOOR)

    def score_document(
        self, document: Document, query_terms: list[str], params: BM25Params
    ) -> float:
        """BM25 score of a single document."""
        doc_length = document.content_length
        length_norm = 1 - params.b + params.b * (doc_length / self._avg_doc_length)

        score = 0.0
        for term in query_terms:
            term_lower = term.lower()
            tf = document.term_frequency(term_lower)
            if tf == 0:
                continue

            numerator = tf * (params.k1 + 1)
            denominator = tf + params.k1 * length_norm
            score += self.idf(term_lower) * (numerator / denominator)

        return score

    def calculate(
        self,
        query_terms: list[str],
        mode: SearchMode = SearchMode.BALANCED,
    ) -> list[BM25Result]:
        """
        Score every document and rank the matches.

        Args:
            query_terms: Normalized query terms
            mode: Selects the (k1, b) pair

        Returns:
            Results with a positive score, highest first. Ties keep
            document order.
        """
        if not query_terms or not self._documents:
            return []

        params = BM25_PARAMS[mode]
        results = []
        for document in self._documents:
            score = self.score_document(document, query_terms, params)
            if score > 0:
                results.append(BM25Result(id=document.id, score=score))

        results.sort(key=lambda r: r.score, reverse=True)
        logger.debug(
            "BM25 (%s) scored %d/%d documents for %s",
            mode.value,
            len(results),
            len(self._documents),
            query_terms,
        )
        return results
