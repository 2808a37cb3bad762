"""HTTP API for the GeoStar energy sync service."""
