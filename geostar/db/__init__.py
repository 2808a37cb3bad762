"""
Database layer: ORM models, async engine/session factory and migrations.

CHANGELOG:
- 2026-10-03: Initial creation (STORY-005)
"""
