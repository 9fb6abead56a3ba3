"""Infrastructure layer: HTTP API, persistence and storage."""
