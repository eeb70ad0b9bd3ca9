"""Request/response schemas for the CallSync player API."""
