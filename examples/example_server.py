"""Example MCP server searching a local folder of markdown files.

This example shows how to build a DocsRepository without an index URL and
serve it with the docsearch tools and resources.
Run with: uv run python examples/example_server.py ./docs
"""

import sys
from pathlib import Path

from docsearch_mcp.config import Config
from docsearch_mcp.corpus import Document, MarkdownDocument, extract_metadata
from docsearch_mcp.main import create_server
from docsearch_mcp.search import DocsRepository


def load_folder(root: Path) -> DocsRepository:
    """Load every *.md file under root; the folder name becomes the category."""
    documents = []
    for doc_id, path in enumerate(sorted(root.rglob("*.md"))):
        content = path.read_text(encoding="utf-8")
        url = path.resolve().as_uri()
        metadata = extract_metadata(content, url)
        documents.append(
            Document(
                doc_id,
                MarkdownDocument(content=content, metadata=metadata, url=url),
                category=path.parent.name,
            )
        )
    return DocsRepository(documents)


if __name__ == "__main__":
    docs_root = Path(sys.argv[1] if len(sys.argv) > 1 else ".")
    repository = load_folder(docs_root)

    print(f"Loaded {repository.total_documents()} documents from {docs_root}")
    print("\nAvailable resources:")
    print("  - docs://documents")
    print("  - docs://documents/{document_id}")
    print("  - docs://categories")
    print("\nAvailable tools:")
    print("  - search_documents")
    print("  - get_document_by_id")
    print("  - get_implementation_guide")
    print("  - get_project_config")
    print("\nPress Ctrl+C to stop")

    mcp = create_server(Config(), repository=repository)
    mcp.run()
