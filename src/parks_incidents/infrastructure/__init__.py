"""Infrastructure layer: HTTP client, query cache and in-memory persistence."""
