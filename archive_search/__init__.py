"""Archive search service package.

Layout:
- ``api``: HTTP endpoints for search and item metadata.
- ``search``: request orchestration (candidate window, fetch, re-rank).
- ``upstream``: archive.org HTTP client.
- ``ranking``: batch-local TF-IDF and heuristic re-ranking.
- ``runtime``: service-local metrics helpers.
"""
