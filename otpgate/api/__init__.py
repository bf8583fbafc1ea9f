"""API layer - FastAPI transport for the identity domain."""
