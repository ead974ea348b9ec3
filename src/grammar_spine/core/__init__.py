"""
Core primitives for grammar-spine: error taxonomy, settings, logging,
process-wide state, and lifecycle.

Tags:
    grammar-spine, core

Doc-Types:
    api-reference
"""
