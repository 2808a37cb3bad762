"""
GeoStar energy sync package.

Scrapes heat-pump energy telemetry from the GeoStar Symphony portal, stores
it in a relational database with reconciliation of provisional "today" data,
and serves daily, hourly and raw views over a FastAPI HTTP API.

CHANGELOG:
- 2026-10-02: Initial creation (STORY-001)

TODO:
- None
"""

__version__ = "0.1.0"
