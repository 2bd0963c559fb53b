"""Tests for the search repository."""

import math
from concurrent.futures import ThreadPoolExecutor

import pytest

from docsearch_mcp.corpus.models import Category
from docsearch_mcp.search.modes import SearchMode
from docsearch_mcp.search.repository import (
    DocsRepository,
    SearchOptions,
    jaccard_similarity,
)
from docsearch_mcp.search.synonyms import SynonymDictionary
from docsearch_mcp.search.weights import WeightCalculator


@pytest.fixture
def login_corpus(make_document):
    """API doc with 5 logins, unknown doc with 1 login, and a doc without it."""
    api_content = "login " * 5 + "x" * (2000 - 30)
    unknown_content = "login " + "y" * (500 - 6)
    return [
        make_document(0, api_content, title="A", category="api"),
        make_document(1, unknown_content, title="B", category="unknown"),
        make_document(2, "nothing relevant in here", title="C", category="examples"),
    ]


@pytest.fixture
def repository(make_document):
    documents = [
        make_document(
            0,
            "# Login API\n\nPOST the credentials to the login endpoint.\n\n"
            "```js\nfetch('/login')\n```",
            title="Login API",
            description="Sign users in",
            category="api",
        ),
        make_document(
            1,
            "# Signup\n\nCreate an account, then login.",
            title="Signup",
            category="api",
        ),
        make_document(
            2,
            "# React login form\n\nA login form component for React apps.",
            title="React login form",
            category="frameworks",
        ),
        make_document(
            3,
            "# Deploy\n\nShip the build to production.",
            title="Deploy",
            category="dev",
        ),
    ]
    common = [
        make_document(
            4,
            "# Security\n\nNever log the login password.",
            title="Security",
            category="security",
        ),
    ]
    return DocsRepository(documents, common)


class TestSearchOptions:
    def test_defaults(self):
        options = SearchOptions(query="login")

        assert options.limit == 5
        assert options.min_score is None
        assert options.mode is SearchMode.BALANCED
        assert options.use_weights is True
        assert options.use_synonyms is True
        assert options.category is None
        assert options.keywords == ()
        assert options.apply_score_ratio is False

    def test_coerces_values(self):
        options = SearchOptions(
            query="login", mode="precise", category="API", keywords=[" JWT ", "", 3], min_score=1
        )

        assert options.mode is SearchMode.PRECISE
        assert options.category is Category.API
        assert options.keywords == ("jwt",)
        assert options.min_score == 1.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"limit": 0},
            {"limit": -3},
            {"limit": True},
            {"limit": 2.5},
            {"min_score": -1},
            {"min_score": math.nan},
            {"min_score": math.inf},
            {"mode": "fuzzy"},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            SearchOptions(query="login", **kwargs)

    def test_frozen(self):
        options = SearchOptions(query="login")
        with pytest.raises(AttributeError):
            options.limit = 10


class TestSearch:
    def test_weighting_ranks_api_above_unknown(self, login_corpus):
        repo = DocsRepository(login_corpus)
        results = repo.search(SearchOptions(query="login", mode=SearchMode.BALANCED))

        assert [r.document_id for r in results] == [0, 1]
        assert results[0].weights.category_weight == 1.3
        assert results[1].weights.category_weight == 0.7

    @pytest.mark.parametrize("query", ["", "   ", "!", "a", None, 123])
    def test_empty_or_invalid_query(self, repository, query):
        assert repository.search(SearchOptions(query=query)) == []

    def test_scores_sorted_non_increasing(self, repository):
        for mode in SearchMode:
            results = repository.search(SearchOptions(query="login form react", mode=mode))
            scores = [r.score for r in results]
            assert scores == sorted(scores, reverse=True)
            assert all(s > 0 for s in scores)

    def test_common_documents_not_searchable(self, repository):
        results = repository.search(SearchOptions(query="password security", limit=10))
        assert 4 not in [r.document_id for r in results]

    def test_limit(self, repository):
        results = repository.search(SearchOptions(query="login", limit=2))
        assert len(results) == 2

    def test_without_weights_uses_bm25_scores(self, repository):
        results = repository.search(SearchOptions(query="login", use_weights=False))

        assert results
        assert all(r.weights is None for r in results)
        assert "weight_breakdown" not in results[0].to_dict()

    def test_synonym_expansion(self, repository):
        with_synonyms = repository.search(SearchOptions(query="로그인"))
        without = repository.search(SearchOptions(query="로그인", use_synonyms=False))

        assert with_synonyms
        assert without == []

    def test_category_filter(self, repository):
        results = repository.search(SearchOptions(query="login", category=Category.FRAMEWORKS))
        assert [r.document_id for r in results] == [2]

    def test_category_filter_term_common_across_categories(self, make_document):
        documents = [
            make_document(i, "# Login\n\nThe login flow.", category="api") for i in range(3)
        ]
        documents.append(
            make_document(3, "# React login\n\nA login form in React.", category="frameworks")
        )
        repository = DocsRepository(documents)

        frameworks = repository.search(SearchOptions(query="login", category=Category.FRAMEWORKS))
        api = repository.search(SearchOptions(query="login", category="api", limit=10))

        assert [r.document_id for r in frameworks] == [3]
        assert [r.document_id for r in api] == [0, 1, 2]
        for result in frameworks + api:
            assert math.isfinite(result.score)
            assert result.score > 0

    def test_category_filter_no_documents(self, repository):
        assert repository.search(SearchOptions(query="login", category="templates")) == []

    def test_keyword_filter(self, repository):
        results = repository.search(SearchOptions(query="login", keywords=["react"]))
        assert [r.document_id for r in results] == [2]

    def test_min_score(self, repository):
        results = repository.search(SearchOptions(query="login", limit=10))
        cutoff = results[0].score

        filtered = repository.search(SearchOptions(query="login", limit=10, min_score=cutoff))
        assert [r.document_id for r in filtered] == [results[0].document_id]

    def test_score_ratio_filter(self, repository):
        options = SearchOptions(
            query="login", limit=10, mode=SearchMode.PRECISE, apply_score_ratio=True
        )
        results = repository.search(options)
        top = results[0].score

        assert all(r.score >= top * 0.7 for r in results)

    def test_relevant_chunks_attached(self, repository):
        results = repository.search(SearchOptions(query="login"))

        for result in results:
            assert 1 <= len(result.relevant_chunks) <= 3
            assert all(c.document_id == result.document_id for c in result.relevant_chunks)

    def test_to_dict(self, repository):
        data = repository.search(SearchOptions(query="login", limit=1))[0].to_dict()

        assert set(data) >= {"document_id", "title", "category", "url", "score", "relevant_chunks"}
        assert set(data["weight_breakdown"]) == {"bm25", "category", "keyword", "context"}

    def test_concurrent_searches_agree(self, repository):
        options = SearchOptions(query="login react")
        expected = [(r.document_id, r.score) for r in repository.search(options)]

        with ThreadPoolExecutor(max_workers=4) as executor:
            runs = list(executor.map(lambda _: repository.search(options), range(20)))

        for run in runs:
            assert [(r.document_id, r.score) for r in run] == expected

    def test_injected_components(self, repository, make_document):
        synonyms = SynonymDictionary({"ship": ["deploy"]})
        weights = WeightCalculator(category_weights={"dev": 5.0})
        repo = DocsRepository(repository.documents, synonyms=synonyms, weight_calculator=weights)

        results = repo.search(SearchOptions(query="deploy"))
        assert results[0].document_id == 3
        assert results[0].weights.category_weight == 5.0
        assert repo.synonyms is synonyms
        assert repo.weight_calculator is weights


class TestLookup:
    def test_get_document_by_id(self, repository):
        assert repository.get_document_by_id(0).title == "Login API"
        assert repository.get_document_by_id(4).title == "Security"  # Common document

    @pytest.mark.parametrize("document_id", [99, -1])
    def test_unknown_id(self, repository, document_id):
        assert repository.get_document_by_id(document_id) is None

    def test_counts(self, repository):
        assert repository.total_documents() == 4
        assert len(repository.common_documents) == 1
        assert len(repository.all_documents) == 5

    def test_documents_by_category(self, repository):
        assert [d.id for d in repository.get_documents_by_category("api")] == [0, 1]
        assert repository.get_documents_by_category(Category.ERRORS) == []

    def test_all_categories(self, repository):
        assert repository.get_all_categories() == [Category.API, Category.FRAMEWORKS, Category.DEV]

    def test_document_frequency_is_copy(self, repository):
        frequency = repository.document_frequency
        frequency["login"] = 1000
        assert repository.document_frequency["login"] != 1000

    def test_duplicate_ids_rejected(self, make_document):
        with pytest.raises(ValueError, match="Duplicate document id"):
            DocsRepository([make_document(0, "a")], [make_document(0, "b")])

    def test_empty_repository(self):
        repo = DocsRepository([])

        assert repo.total_documents() == 0
        assert repo.search(SearchOptions(query="login")) == []
        assert repo.get_all_categories() == []


class TestSimilarity:
    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            ({"a", "b"}, {"b", "c"}, 1 / 3),
            ({"a"}, {"a"}, 1.0),
            ({"a"}, {"b"}, 0.0),
            (set(), set(), 0.0),
        ],
    )
    def test_jaccard(self, a, b, expected):
        assert jaccard_similarity(a, b) == pytest.approx(expected)
        assert jaccard_similarity(b, a) == pytest.approx(expected)

    def test_similar_documents(self, make_document):
        base = make_document(0, "x", keywords=["login", "jwt", "token"], category="api")
        close = make_document(1, "x", keywords=["login", "jwt", "cookie"], category="api")
        unrelated = make_document(
            2, "x", title="Zeta", keywords=["alpha", "beta"], category="errors"
        )
        twin = make_document(3, "x", keywords=["login", "jwt", "token"], category="api")
        repo = DocsRepository([base, close, unrelated], [twin])

        similar = repo.get_similar_documents(base)

        assert [d.id for d in similar] == [3, 1]
        assert base not in similar

    def test_similar_limit(self, make_document):
        docs = [make_document(i, "x", keywords=["login"], category="api") for i in range(6)]
        repo = DocsRepository(docs)

        assert len(repo.get_similar_documents(docs[0])) == 3
        assert len(repo.get_similar_documents(docs[0], limit=5)) == 5
