"""
Search module for docsearch-mcp.

Ranking pipeline over the in-memory corpus: query normalization, synonym
expansion, BM25 scoring, domain weighting, and the repository that ties
them into one search call.
"""

from docsearch_mcp.search.bm25 import BM25Calculator, BM25Result, normalize_query
from docsearch_mcp.search.modes import MIN_SCORE_RATIO, BM25Params, SearchMode
from docsearch_mcp.search.repository import (
    DocsRepository,
    SearchOptions,
    SearchResult,
    jaccard_similarity,
)
from docsearch_mcp.search.synonyms import SynonymDictionary
from docsearch_mcp.search.weights import WeightCalculator, WeightedResult

__all__ = [
    "BM25Calculator",
    "BM25Params",
    "BM25Result",
    "DocsRepository",
    "MIN_SCORE_RATIO",
    "SearchMode",
    "SearchOptions",
    "SearchResult",
    "SynonymDictionary",
    "WeightCalculator",
    "WeightedResult",
    "jaccard_similarity",
    "normalize_query",
]
