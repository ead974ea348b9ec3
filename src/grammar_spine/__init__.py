"""
grammar-spine — grammar and spelling findings over HTTP.

Layers:
    checking       The pipeline: size guard, engine adapter, span localizer,
                   category classifier, response assembler
    api            FastAPI transport with the middleware chain
    core           Errors, settings, logging, process lifecycle
    execution      Per-client rate limiting
    observability  Metrics registry and request spans
    cli            ``grammar-spine serve`` / ``grammar-spine check``
"""

__version__ = "0.1.0"
