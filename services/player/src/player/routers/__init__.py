"""
API router package for the CallSync player.

Contains the FastAPI routers for health, transcripts, recordings,
documents and sessions.
"""
