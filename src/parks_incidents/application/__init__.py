"""Application layer: client-side use cases and list DTOs."""
