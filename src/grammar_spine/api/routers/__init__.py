"""API routers package.

Manifesto:
    Each router module owns one endpoint group and delegates to
    ``grammar_spine.checking`` for the actual work.

Tags:
    grammar-spine, api, routers, REST

Doc-Types:
    api-reference
"""
