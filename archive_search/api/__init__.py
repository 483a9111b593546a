"""API subpackage for the archive search service.

Routers expose endpoints for searching and item metadata lookups. The
transport layer remains thin and delegates to ``SearchManager``.
"""
