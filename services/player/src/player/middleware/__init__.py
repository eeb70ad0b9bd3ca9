"""HTTP middleware for the CallSync player API."""
