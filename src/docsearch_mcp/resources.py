"""MCP Resources for docsearch-mcp.

Resources expose the loaded documentation corpus as read-only URIs.
"""

from docsearch_mcp.search.repository import DocsRepository


def get_documents_resource(repository: DocsRepository) -> str:
    """Resource: docs://documents

    Lists every loaded document grouped by category.
    """
    result_lines = ["# Documents\n"]
    result_lines.append(f"Searchable documents: {repository.total_documents()}\n")
    result_lines.append(f"Common documents: {len(repository.common_documents)}\n")
    result_lines.append("\n")

    for category in repository.get_all_categories():
        result_lines.append(f"## {category.value}\n\n")
        for document in repository.get_documents_by_category(category):
            result_lines.append(f"- [{document.id}] {document.title} ({document.url})\n")
        result_lines.append("\n")

    if repository.common_documents:
        result_lines.append("## common\n\n")
        for document in repository.common_documents:
            result_lines.append(f"- [{document.id}] {document.title} ({document.url})\n")

    return "".join(result_lines)


def get_document_resource(repository: DocsRepository, document_id: int | str) -> str:
    """Resource: docs://documents/{document_id}

    Returns the document's markdown with a short metadata header.

    Raises:
        ValueError: If the id is not an integer or no such document exists
    """
    try:
        doc_id = int(document_id)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid document id '{document_id}'") from e

    document = repository.get_document_by_id(doc_id)
    if document is None:
        raise ValueError(f"Document '{doc_id}' not found")

    header = (
        f"<!-- id: {document.id} | category: {document.category.value} "
        f"| url: {document.url} -->\n\n"
    )
    return header + document.content


def get_categories_resource(repository: DocsRepository) -> str:
    """Resource: docs://categories"""
    weights = repository.weight_calculator
    result_lines = ["# Categories\n\n"]
    for category in repository.get_all_categories():
        count = len(repository.get_documents_by_category(category))
        result_lines.append(
            f"- {category.value}: {count} documents "
            f"(weight {weights.category_weight(category):.1f})\n"
        )
    return "".join(result_lines)


def register_resources(mcp, repository: DocsRepository):
    """Register all resources with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        repository: Loaded document repository
    """

    @mcp.resource("docs://documents")
    def list_documents():
        """List all documents grouped by category."""
        return get_documents_resource(repository)

    @mcp.resource("docs://documents/{document_id}")
    def read_document(document_id: str):
        """Read one document's markdown."""
        return get_document_resource(repository, document_id)

    @mcp.resource("docs://categories")
    def list_categories():
        """List categories with document counts and weights."""
        return get_categories_resource(repository)
