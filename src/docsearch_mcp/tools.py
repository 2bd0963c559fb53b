"""MCP tools for docsearch-mcp server.

This module defines the tools exposed by the MCP server:
- search_documents: Ranked search across the documentation corpus
- get_document_by_id: Read a complete document by id, with related documents
- get_implementation_guide: Full documents for a feature/framework combination
- get_project_config: Show the configured project id and API endpoints
"""

import logging
from typing import Any
from urllib.parse import urlparse

from fastmcp import FastMCP

from docsearch_mcp.config import Config
from docsearch_mcp.corpus.document import Document
from docsearch_mcp.params import (
    clamp_limit,
    log_parameters,
    parse_category,
    parse_keywords,
    parse_query,
)
from docsearch_mcp.search.modes import SearchMode
from docsearch_mcp.search.repository import DocsRepository, SearchOptions

logger = logging.getLogger(__name__)

PROJECT_ID_PLACEHOLDER = "[PROJECT_ID]"

# Max characters of each chunk excerpt in search results
EXCERPT_CHARS = 200

MAX_SEARCH_LIMIT = 10
SIMILAR_DOCUMENTS = 3
METADATA_KEYWORDS_SHOWN = 10

GUIDE_FEATURES = ("login", "signup", "info", "logout")
GUIDE_FRAMEWORKS = ("react", "vue", "nextjs", "vanilla")
DEFAULT_GUIDE_QUERY = "auth authentication"
GUIDE_LIMIT = 5

SEARCH_HINT = (
    "Try keywords such as: login, signup, authentication, jwt, token (API); "
    "react, vue, nextjs, javascript (frameworks); security, cors, cookie, "
    "validation (security); error, troubleshooting, debugging (errors)."
)


def _excerpt(text: str) -> str:
    if len(text) <= EXCERPT_CHARS:
        return text
    return text[:EXCERPT_CHARS] + "..."


def apply_project_id(content: str, project_id: str | None) -> str:
    """Replace [PROJECT_ID] placeholders when a project id is configured."""
    if not project_id:
        return content
    return content.replace(PROJECT_ID_PLACEHOLDER, project_id)


def project_endpoints(index_url: str) -> dict[str, str]:
    """API base URL and cookie domain derived from the docs host.

    docs.example.com -> https://api.example.com and .example.com
    """
    host = urlparse(index_url).hostname or ""
    labels = host.split(".")
    base = ".".join(labels[1:]) if len(labels) > 2 else host
    return {
        "api_base_url": f"https://api.{base}",
        "cookie_domain": f".{base}",
    }


def _document_summary(document: Document) -> dict[str, Any]:
    return {
        "id": document.id,
        "title": document.title,
        "description": document.description,
        "url": document.url,
    }


def search_documents(
    repository: DocsRepository,
    keywords: Any = None,
    query: Any = None,
    category: Any = None,
    search_mode: Any = None,
    limit: Any = 5,
) -> dict[str, Any]:
    """Run a weighted, synonym-expanded search and shape the response.

    Keywords take precedence over the free-text query.
    """
    log_parameters(
        "search_documents",
        {"keywords": keywords, "query": query, "category": category,
         "search_mode": search_mode, "limit": limit},
    )

    keyword_list = parse_keywords(keywords)
    query_text = parse_query(query)
    if keyword_list:
        search_query = " ".join(keyword_list)
    elif query_text:
        search_query = query_text
    else:
        return {
            "query": "",
            "count": 0,
            "results": [],
            "error": "A search keyword is required, e.g. keywords=['login', 'react'].",
            "hint": SEARCH_HINT,
        }

    try:
        options = SearchOptions(
            query=search_query,
            limit=clamp_limit(limit, maximum=MAX_SEARCH_LIMIT),
            mode=SearchMode.parse(search_mode),
            category=parse_category(category),
            use_weights=True,
            use_synonyms=True,
        )
    except ValueError as e:
        return {"query": search_query, "count": 0, "results": [], "error": str(e)}

    results = repository.search(options)
    response: dict[str, Any] = {
        "query": search_query,
        "search_mode": options.mode.value,
        "count": len(results),
        "results": [
            {
                "document_id": r.document.id,
                "title": r.document.title,
                "category": r.document.category.value,
                "url": r.document.url,
                "description": r.document.description,
                "score": round(r.score, 2),
                "relevant_chunks": [_excerpt(c.raw_text) for c in r.relevant_chunks],
                "weight_breakdown": r.weights.breakdown() if r.weights else None,
            }
            for r in results
        ],
    }
    if not results:
        response["hint"] = SEARCH_HINT
    return response


def get_document(
    repository: DocsRepository,
    config: Config,
    document_id: int,
    include_metadata: bool = False,
) -> dict[str, Any]:
    """Full document content by id, with related documents."""
    document = repository.get_document_by_id(document_id)
    if document is None:
        return {
            "id": document_id,
            "exists": False,
            "title": None,
            "content": None,
            "metadata": None,
            "similar_documents": [],
            "error": (
                f"No document with id {document_id}. "
                "Use search_documents to find document ids first."
            ),
        }

    metadata = None
    if include_metadata:
        metadata = {
            "id": document.id,
            "category": document.category.value,
            "url": document.url,
            "description": document.description,
            "keywords": sorted(document.keywords)[:METADATA_KEYWORDS_SHOWN],
        }

    similar = repository.get_similar_documents(document, SIMILAR_DOCUMENTS)
    return {
        "id": document.id,
        "exists": True,
        "title": document.title,
        "content": apply_project_id(document.content, config.project_id),
        "project_id_applied": config.project_id is not None,
        "metadata": metadata,
        "similar_documents": [_document_summary(d) for d in similar],
        "error": None,
    }


def implementation_guide(
    repository: DocsRepository,
    config: Config,
    feature: str | None = None,
    framework: str | None = None,
    keywords: str | None = None,
) -> dict[str, Any]:
    """Collect full documents relevant to implementing a feature."""
    parts: list[str] = []
    if feature and framework:
        parts.append(f"{feature} {framework}")
    elif feature:
        parts.append(feature)
    elif framework:
        parts.append(framework)
    if keywords:
        parts.append(keywords)
    query = " ".join(parts) or DEFAULT_GUIDE_QUERY

    results = repository.search(SearchOptions(query=query, limit=GUIDE_LIMIT))

    return {
        "query": query,
        "feature": feature,
        "framework": framework,
        "keywords": keywords,
        "project": get_project_config(config),
        "documents": [
            {
                **_document_summary(r.document),
                "category": r.document.category.value,
                "content": apply_project_id(r.document.content, config.project_id),
            }
            for r in results
        ],
    }


def get_project_config(config: Config) -> dict[str, Any]:
    """Configured project id plus the endpoints code samples should use."""
    return {
        "project_id": config.project_id,
        "configured": config.project_id is not None,
        **project_endpoints(config.index_url),
    }


def register_tools(mcp: FastMCP, repository: DocsRepository, config: Config) -> None:
    """Register all tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        repository: Loaded document repository
        config: Configuration (project id, index URL)
    """

    @mcp.tool(name="search_documents")
    def search_documents_tool(
        keywords: list[str] | str | None = None,
        query: str | None = None,
        category: str | None = None,
        search_mode: str = "balanced",
        limit: int = 5,
    ) -> dict:
        """Search the documentation corpus by keywords.

        Covers API references, implementation guides, security guides and
        example code. Korean and English keywords are both understood and
        expanded with synonyms (e.g. "로그인" also matches "login").

        Args:
            keywords: Keywords to search for, e.g. ["login", "React"] (preferred)
            query: Free-text query, used only when keywords is empty
            category: Optional filter: api, templates, security, examples, dev,
                frameworks, errors, config
            search_mode: broad (wide recall), balanced (default) or precise
            limit: Maximum number of results (default 5, max 10)

        Returns:
            Search results with:
            - document_id: Id for get_document_by_id
            - title, category, url, description
            - score: Relevance score (higher is better)
            - relevant_chunks: Up to 3 matching excerpts
            - weight_breakdown: BM25 score and applied multipliers
        """
        try:
            return search_documents(repository, keywords, query, category, search_mode, limit)
        except Exception as e:
            logger.exception("search_documents failed")
            return {"count": 0, "results": [], "error": f"Error searching documents: {e}"}

    @mcp.tool(name="get_document_by_id")
    def get_document_by_id_tool(id: int, include_metadata: bool = False) -> dict:
        """Read the full content of a document by id.

        [PROJECT_ID] placeholders in code samples are replaced with the
        configured project id.

        Args:
            id: Document id (from search_documents results)
            include_metadata: Include category, url, description and keywords

        Returns:
            Document with:
            - exists: Whether the document was found
            - title, content
            - metadata: Only when include_metadata is true
            - similar_documents: Up to 3 related documents
            - error: Message if not found
        """
        return get_document(repository, config, id, include_metadata)

    @mcp.tool(name="get_implementation_guide")
    def get_implementation_guide_tool(
        feature: str | None = None,
        framework: str | None = None,
        keywords: str | None = None,
    ) -> dict:
        """Get the full documents needed to implement a feature.

        Args:
            feature: login, signup, info or logout
            framework: react, vue, nextjs or vanilla
            keywords: Extra search keywords (optional)

        Returns:
            Project endpoints plus the full content of up to 5 documents.
        """
        if feature is not None and feature not in GUIDE_FEATURES:
            return {"documents": [], "error": f"Unknown feature '{feature}'"}
        if framework is not None and framework not in GUIDE_FRAMEWORKS:
            return {"documents": [], "error": f"Unknown framework '{framework}'"}
        return implementation_guide(repository, config, feature, framework, keywords)

    @mcp.tool(name="get_project_config")
    def get_project_config_tool() -> dict:
        """Show the project id configured for this server.

        Returns:
            project_id (null if unset), configured flag, api_base_url, cookie_domain
        """
        return get_project_config(config)
