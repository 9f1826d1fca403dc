# server/askbudi/libraries.py
"""Library catalog behind the gateway endpoints.

There is no index behind this yet: search matches against a fixed catalog and
docs return a canned snippet.
"""
from typing import Optional

SEARCH_COST = 1
DOCS_COST = 5  # docs return more data and are billed higher

MAX_SEARCH_LIMIT = 50
MAX_DOCS_LIMIT = 20

CATALOG = [
    {
        "library_id": "/fastapi/fastapi",
        "name": "FastAPI",
        "aliases": {"pip": "fastapi", "github": "tiangolo/fastapi"},
        "available_versions": ["0.104.1", "0.103.2", "0.103.1"],
        "metadata": {
            "description": "FastAPI framework, high performance, easy to learn, fast to code, ready for production",
            "github_stars": 68500,
            "github_url": "https://github.com/tiangolo/fastapi",
        },
        "relevance_score": 0.95,
    },
]

QUICKSTART_SNIPPET = """# FastAPI Quick Start

```python
from fastapi import FastAPI

app = FastAPI()

@app.get("/")
def read_root():
    return {"Hello": "World"}

@app.get("/items/{item_id}")
def read_item(item_id: int, q: str = None):
    return {"item_id": item_id, "q": q}
```

This creates a basic FastAPI application with two endpoints."""


def search_libraries(search_term: str, limit: int = 10) -> dict:
    """Match the term against catalog names in either direction."""
    term = search_term.lower()
    results = [
        lib for lib in CATALOG
        if term in lib["name"].lower() or lib["name"].lower() in term
    ][:min(limit, MAX_SEARCH_LIMIT)]

    return {
        "results": results,
        "total_count": len(results),
        "search_term": search_term,
    }


def get_library_docs(library_id: str, prompt: str, version: Optional[str] = None, limit: int = 5) -> dict:
    resolved_version = version or "latest"
    snippets = [
        {
            "content": QUICKSTART_SNIPPET,
            "relevance_score": 0.92,
            "version": resolved_version,
        },
    ][:min(limit, MAX_DOCS_LIMIT)]

    return {
        "library_name": "FastAPI",
        "library_id": library_id,
        "version": resolved_version,
        "snippets": snippets,
        "total_snippets": len(snippets),
        "prompt": prompt,
    }
