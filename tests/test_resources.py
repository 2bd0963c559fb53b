"""Tests for MCP resources."""

import pytest
from fastmcp import Client, FastMCP

from docsearch_mcp.resources import (
    get_categories_resource,
    get_document_resource,
    get_documents_resource,
    register_resources,
)
from docsearch_mcp.search.repository import DocsRepository


@pytest.fixture
def repository(make_document):
    documents = [
        make_document(0, "# Login\n\nlogin body", title="Login", category="api"),
        make_document(1, "# Signup\n\nsignup body", title="Signup", category="api"),
        make_document(2, "# React\n\nreact body", title="React", category="frameworks"),
    ]
    common = [make_document(3, "# Errors\n\nerror codes", title="Errors")]
    return DocsRepository(documents, common)


class TestDocumentsResource:
    def test_lists_by_category(self, repository):
        result = get_documents_resource(repository)

        assert "# Documents" in result
        assert "Searchable documents: 3" in result
        assert "Common documents: 1" in result
        assert result.index("## api") < result.index("## frameworks")
        assert "- [0] Login (https://docs.example.com/doc-0.md)" in result
        assert "## common" in result
        assert "- [3] Errors" in result

    def test_empty_repository(self):
        result = get_documents_resource(DocsRepository([]))

        assert "Searchable documents: 0" in result
        assert "## common" not in result


class TestDocumentResource:
    def test_returns_content_with_header(self, repository):
        result = get_document_resource(repository, "2")

        assert result.startswith("<!-- id: 2 | category: frameworks |")
        assert result.endswith("# React\n\nreact body")

    def test_common_document(self, repository):
        assert "error codes" in get_document_resource(repository, 3)

    def test_not_found(self, repository):
        with pytest.raises(ValueError, match="Document '99' not found"):
            get_document_resource(repository, "99")

    def test_invalid_id(self, repository):
        with pytest.raises(ValueError, match="Invalid document id"):
            get_document_resource(repository, "abc")


class TestCategoriesResource:
    def test_counts_and_weights(self, repository):
        result = get_categories_resource(repository)

        assert "- api: 2 documents (weight 1.3)" in result
        assert "- frameworks: 1 documents (weight 1.0)" in result
        assert "unknown" not in result  # Common documents are not searchable


class TestRegisteredResources:
    @pytest.mark.asyncio
    async def test_read_through_client(self, repository):
        mcp = FastMCP("test")
        register_resources(mcp, repository)

        async with Client(mcp) as client:
            categories = await client.read_resource("docs://categories")
            document = await client.read_resource("docs://documents/0")

        assert "api: 2 documents" in categories[0].text
        assert "login body" in document[0].text
