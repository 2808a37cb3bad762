"""
Domain services: session persistence, reading ingestion and reconciliation,
aggregated read views, and the fetch/backfill jobs.

CHANGELOG:
- 2026-10-05: Initial creation (STORY-006)
"""
