"""
docsearch-mcp - MCP server for searching a markdown documentation corpus.

Fetches the documents listed in an llms.txt-style index, keeps them in memory,
and answers ranked searches (BM25 + domain weights + synonym expansion) for
AI agents over the Model Context Protocol.

Stack:
- Python + FastMCP
- httpx (document fetching)
- In-memory lexical index (no persistence)
"""

__version__ = "0.1.0"
