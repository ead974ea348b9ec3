"""
REST transport for grammar-spine.

Run with uvicorn::

    uvicorn grammar_spine.api:create_app --factory --port 8080

Tags:
    grammar-spine, api, FastAPI, REST

Doc-Types:
    api-reference
"""

from grammar_spine.api.app import create_app

__all__ = ["create_app"]
