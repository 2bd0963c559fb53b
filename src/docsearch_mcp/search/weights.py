"""Domain weighting applied on top of BM25 scores."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from docsearch_mcp.corpus.document import Document
from docsearch_mcp.corpus.models import Category
from docsearch_mcp.search.bm25 import BM25Result

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_WEIGHTS: Mapping[Category, float] = MappingProxyType({
    Category.API: 1.3,
    Category.TEMPLATES: 1.2,
    Category.SECURITY: 1.1,
    Category.EXAMPLES: 1.0,
    Category.FRAMEWORKS: 1.0,
    Category.DEV: 1.0,
    Category.CONFIG: 0.9,
    Category.ERRORS: 0.8,
    Category.UNKNOWN: 0.7,
})

DEFAULT_KEYWORD_WEIGHTS: Mapping[str, float] = MappingProxyType({
    # Core auth features
    "login": 1.5,
    "signup": 1.5,
    "auth": 1.3,
    "authentication": 1.3,
    "info": 1.3,
    # Korean auth terms
    "인증": 1.5,
    "로그인": 1.5,
    "회원가입": 1.5,
    "사용자정보": 1.3,
    "사용자": 1.3,
    # Auth related
    "cookie": 1.2,
    "token": 1.2,
    "user": 1.2,
    "profile": 1.2,
    "account": 1.2,
    "register": 1.2,
    "signin": 1.2,
})

DEFAULT_CONTEXT_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "title": 1.5,
    "description": 1.2,
})

DEFAULT_WEIGHT = 1.0
MAX_KEYWORD_WEIGHT = 2.0
MAX_CONTEXT_WEIGHT = 2.0


def _category_key(category: Category | str) -> Category:
    """Strict category lookup for table updates.

    Raises:
        ValueError: If the string names no category
    """
    if isinstance(category, Category):
        return category
    return Category(category.strip().lower())


@dataclass(frozen=True)
class WeightedResult:
    """BM25 result with the multipliers applied to it."""

    id: int
    score: float
    category_weight: float
    keyword_weight: float
    context_weight: float
    final_score: float

    def breakdown(self) -> dict[str, float]:
        return {
            "bm25": round(self.score, 4),
            "category": self.category_weight,
            "keyword": round(self.keyword_weight, 4),
            "context": round(self.context_weight, 4),
        }


class WeightCalculator:
    """
    Multiplies BM25 scores by category, keyword and context weights.

    Each table starts from the module defaults with constructor overrides
    merged on top. The tables belong to the instance; updating one never
    touches another calculator or the defaults.
    """

    def __init__(
        self,
        category_weights: Mapping[Category | str, float] | None = None,
        keyword_weights: Mapping[str, float] | None = None,
        context_weights: Mapping[str, float] | None = None,
    ):
        self._category_weights: dict[Category, float] = dict(DEFAULT_CATEGORY_WEIGHTS)
        for category, weight in (category_weights or {}).items():
            self._category_weights[_category_key(category)] = float(weight)

        self._keyword_weights: dict[str, float] = dict(DEFAULT_KEYWORD_WEIGHTS)
        for keyword, weight in (keyword_weights or {}).items():
            self._keyword_weights[keyword.strip().lower()] = float(weight)

        self._context_weights: dict[str, float] = dict(DEFAULT_CONTEXT_WEIGHTS)
        self._context_weights.update(context_weights or {})

    def apply(
        self,
        results: Iterable[BM25Result],
        documents: Iterable[Document],
        query_terms: list[str],
    ) -> list[WeightedResult]:
        """
        Apply all weights and re-sort by final score (highest first).

        A result whose document is missing passes through with every
        multiplier at 1.0.
        """
        document_map = {doc.id: doc for doc in documents}
        terms = [t.strip().lower() for t in query_terms if t.strip()]

        weighted: list[WeightedResult] = []
        for result in results:
            document = document_map.get(result.id)
            if document is None:
                logger.warning("Document not found for id: %s", result.id)
                weighted.append(
                    WeightedResult(
                        id=result.id,
                        score=result.score,
                        category_weight=DEFAULT_WEIGHT,
                        keyword_weight=DEFAULT_WEIGHT,
                        context_weight=DEFAULT_WEIGHT,
                        final_score=result.score,
                    )
                )
                continue

            category_weight = self.category_weight(document.category)
            keyword_weight = self.keyword_weight(document, terms)
            context_weight = self.context_weight(document, terms)
            weighted.append(
                WeightedResult(
                    id=result.id,
                    score=result.score,
                    category_weight=category_weight,
                    keyword_weight=keyword_weight,
                    context_weight=context_weight,
                    final_score=result.score * category_weight * keyword_weight * context_weight,
                )
            )

        weighted.sort(key=lambda r: r.final_score, reverse=True)
        return weighted

    def category_weight(self, category: Category | str) -> float:
        """Weight for a category; 1.0 if the table has no entry."""
        return self._category_weights.get(Category.parse(category), DEFAULT_WEIGHT)

    def keyword_weight(self, document: Document, query_terms: list[str]) -> float:
        """Product of weights for query terms the document contains, capped at 2.0."""
        default = self._keyword_weights.get("default", DEFAULT_WEIGHT)
        total = 1.0
        for term in query_terms:
            normalized = term.strip().lower()
            weight = self._keyword_weights.get(normalized, default)
            if document.has_keyword(normalized):
                total *= weight
        return min(total, MAX_KEYWORD_WEIGHT)

    def context_weight(self, document: Document, query_terms: list[str]) -> float:
        """Boost for query terms found in the title or description, capped at 2.0."""
        title = document.title.lower()
        description = document.description.lower()
        title_weight = self._context_weights.get("title", DEFAULT_WEIGHT)
        description_weight = self._context_weights.get("description", DEFAULT_WEIGHT)

        total = 1.0
        for term in query_terms:
            normalized = term.strip().lower()
            if not normalized:
                continue
            if normalized in title:
                total *= title_weight
            if normalized in description:
                total *= description_weight
        return min(total, MAX_CONTEXT_WEIGHT)

    def update_category_weight(self, category: Category | str, weight: float) -> None:
        self._category_weights[_category_key(category)] = float(weight)

    def update_keyword_weight(self, keyword: str, weight: float) -> None:
        self._keyword_weights[keyword.strip().lower()] = float(weight)

    @property
    def category_weights(self) -> Mapping[Category, float]:
        """Read-only view of the category table."""
        return MappingProxyType(self._category_weights)

    @property
    def keyword_weights(self) -> Mapping[str, float]:
        """Read-only view of the keyword table."""
        return MappingProxyType(self._keyword_weights)

    @property
    def context_weights(self) -> Mapping[str, float]:
        return MappingProxyType(self._context_weights)
