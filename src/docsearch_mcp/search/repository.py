"""Repository: the single entry point for ranked document search."""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from docsearch_mcp.corpus.document import Document
from docsearch_mcp.corpus.models import Category, Chunk
from docsearch_mcp.search.bm25 import (
    BM25Calculator,
    build_document_frequency,
    normalize_query,
)
from docsearch_mcp.search.modes import SearchMode, min_score_threshold
from docsearch_mcp.search.synonyms import SynonymDictionary
from docsearch_mcp.search.weights import WeightCalculator, WeightedResult

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
MAX_RELEVANT_CHUNKS = 3
SIMILARITY_THRESHOLD = 0.1
DEFAULT_SIMILAR_LIMIT = 3


@dataclass(frozen=True)
class SearchOptions:
    """
    Options for one search, validated at construction.

    Attributes:
        query: Raw query string (empty or non-string yields no results)
        limit: Maximum results to return (>= 1)
        min_score: Drop results scoring below this
        mode: BM25 parameter set
        use_weights: Apply the WeightCalculator
        use_synonyms: Expand the query through the SynonymDictionary
        category: Only score documents in this category
        keywords: Keep results whose document has any of these keywords
        apply_score_ratio: Drop results below the mode's ratio of the top score
    """

    query: str
    limit: int = DEFAULT_LIMIT
    min_score: float | None = None
    mode: SearchMode = SearchMode.BALANCED
    use_weights: bool = True
    use_synonyms: bool = True
    category: Category | None = None
    keywords: tuple[str, ...] = field(default_factory=tuple)
    apply_score_ratio: bool = False

    def __post_init__(self):
        object.__setattr__(self, "mode", SearchMode.parse(self.mode))

        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
            raise ValueError(f"limit must be a positive integer, got {self.limit!r}")

        if self.min_score is not None:
            min_score = float(self.min_score)
            if not math.isfinite(min_score) or min_score < 0:
                raise ValueError(f"min_score must be a non-negative number, got {self.min_score!r}")
            object.__setattr__(self, "min_score", min_score)

        if self.category is not None:
            object.__setattr__(self, "category", Category.parse(self.category))

        keywords = tuple(
            k.strip().lower() for k in self.keywords if isinstance(k, str) and k.strip()
        )
        object.__setattr__(self, "keywords", keywords)


@dataclass(frozen=True)
class SearchResult:
    """One ranked hit."""

    document: Document
    score: float
    relevant_chunks: tuple[Chunk, ...] = ()
    weights: WeightedResult | None = None

    @property
    def document_id(self) -> int:
        return self.document.id

    def to_dict(self) -> dict:
        result = {
            "document_id": self.document.id,
            "title": self.document.title,
            "category": self.document.category.value,
            "url": self.document.url,
            "score": round(self.score, 4),
            "relevant_chunks": [chunk.text for chunk in self.relevant_chunks],
        }
        if self.weights is not None:
            result["weight_breakdown"] = self.weights.breakdown()
        return result


def jaccard_similarity(a: Iterable[str], b: Iterable[str]) -> float:
    """Intersection over union of two keyword sets (0.0 when both are empty)."""
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


class DocsRepository:
    """
    Owns the loaded documents and runs the search pipeline.

    Documents are split into a searchable set and a "common" set. Common
    documents never show up in ranked results but can be looked up by id
    and take part in similarity comparisons.

    Pipeline: normalize -> expand synonyms -> BM25 -> weights -> attach
    chunks -> filter -> truncate.

    Thread Safety:
        The document sets and the document-frequency index are built once in
        the constructor and never change; searches can run concurrently.
    """

    def __init__(
        self,
        documents: Iterable[Document],
        common_documents: Iterable[Document] = (),
        synonyms: SynonymDictionary | None = None,
        weight_calculator: WeightCalculator | None = None,
    ):
        """
        Args:
            documents: Searchable documents
            common_documents: Documents available by id only
            synonyms: Dictionary for query expansion (defaults built in)
            weight_calculator: Domain weighting (defaults built in)

        Raises:
            ValueError: If two documents share an id
        """
        self._documents = tuple(documents)
        self._common_documents = tuple(common_documents)

        self._by_id: dict[int, Document] = {}
        for document in self._documents + self._common_documents:
            if document.id in self._by_id:
                raise ValueError(f"Duplicate document id: {document.id}")
            self._by_id[document.id] = document

        self._document_frequency = build_document_frequency(self._documents)
        self._bm25 = BM25Calculator(self._documents, self._document_frequency)
        # Per-category calculators: df and N cover the same subset
        self._category_bm25: dict[Category, BM25Calculator] = {}
        for category in dict.fromkeys(doc.category for doc in self._documents):
            subset = [doc for doc in self._documents if doc.category == category]
            self._category_bm25[category] = BM25Calculator(
                subset, build_document_frequency(subset)
            )
        self._synonyms = synonyms if synonyms is not None else SynonymDictionary()
        self._weights = weight_calculator if weight_calculator is not None else WeightCalculator()

        logger.info(
            "Repository ready: %d searchable, %d common documents, %d indexed terms",
            len(self._documents),
            len(self._common_documents),
            len(self._document_frequency),
        )

    @property
    def documents(self) -> tuple[Document, ...]:
        return self._documents

    @property
    def common_documents(self) -> tuple[Document, ...]:
        return self._common_documents

    @property
    def all_documents(self) -> tuple[Document, ...]:
        return self._documents + self._common_documents

    @property
    def synonyms(self) -> SynonymDictionary:
        return self._synonyms

    @property
    def weight_calculator(self) -> WeightCalculator:
        return self._weights

    @property
    def document_frequency(self) -> dict[str, int]:
        return dict(self._document_frequency)

    def total_documents(self) -> int:
        """Number of searchable documents."""
        return len(self._documents)

    def search(self, options: SearchOptions) -> list[SearchResult]:
        """
        Run a ranked search.

        Steps, in order:
        1. Normalize the query into terms (nothing left -> no results)
        2. Expand terms through the synonym dictionary (if enabled)
        3. Score the searchable set with BM25 in the requested mode
        4. Apply domain weights (if enabled), else keep BM25 scores
        5. Attach up to 3 relevant chunks per result
        6. Apply keyword, score-ratio and minimum-score filters
        7. Truncate to the limit
        """
        terms = normalize_query(options.query)
        if not terms:
            return []

        if options.use_synonyms:
            terms = self._synonyms.expand(terms)
        logger.debug("Search terms: %s", terms)

        calculator = self._calculator_for(options.category)
        bm25_results = calculator.calculate(terms, options.mode)

        scored: list[tuple[int, float, WeightedResult | None]]
        if options.use_weights:
            weighted = self._weights.apply(bm25_results, self._documents, terms)
            scored = [(w.id, w.final_score, w) for w in weighted]
        else:
            scored = [(r.id, r.score, None) for r in bm25_results]

        results: list[SearchResult] = []
        for document_id, score, weights in scored:
            document = self._by_id.get(document_id)
            if document is None:
                continue
            results.append(
                SearchResult(
                    document=document,
                    score=score,
                    relevant_chunks=tuple(
                        document.relevant_chunks(terms, MAX_RELEVANT_CHUNKS)
                    ),
                    weights=weights,
                )
            )

        if options.keywords:
            results = [
                r for r in results if any(r.document.has_keyword(k) for k in options.keywords)
            ]

        if options.apply_score_ratio and results:
            threshold = min_score_threshold(results[0].score, options.mode)
            results = [r for r in results if r.score >= threshold]

        if options.min_score is not None:
            results = [r for r in results if r.score >= options.min_score]

        return results[: options.limit]

    def _calculator_for(self, category: Category | None) -> BM25Calculator:
        if category is None:
            return self._bm25
        calculator = self._category_bm25.get(category)
        if calculator is None:
            return BM25Calculator([], {})
        return calculator

    def get_document_by_id(self, document_id: int) -> Document | None:
        """Look up any document (searchable or common); None if unknown."""
        return self._by_id.get(document_id)

    def get_documents_by_category(self, category: Category | str) -> list[Document]:
        target = Category.parse(category)
        return [doc for doc in self._documents if doc.category == target]

    def get_all_categories(self) -> list[Category]:
        """Categories present in the searchable set, in first-seen order."""
        return list(dict.fromkeys(doc.category for doc in self._documents))

    def get_similar_documents(
        self, document: Document, limit: int = DEFAULT_SIMILAR_LIMIT
    ) -> list[Document]:
        """
        Documents whose keyword sets overlap the given one.

        Jaccard similarity above SIMILARITY_THRESHOLD, highest first, the
        document itself excluded. Common documents are included.
        """
        similarities: list[tuple[float, Document]] = []
        for candidate in self.all_documents:
            if candidate.id == document.id:
                continue
            similarity = jaccard_similarity(document.keywords, candidate.keywords)
            if similarity > SIMILARITY_THRESHOLD:
                similarities.append((similarity, candidate))

        similarities.sort(key=lambda item: item[0], reverse=True)
        return [doc for _, doc in similarities[:limit]]
