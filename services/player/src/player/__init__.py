"""
Player service for CallSync.

Parses call transcripts, pairs them with their recordings and keeps the
active transcript entry synchronized with audio playback. Also exposes
the parser, pairing and content sources over a small FastAPI app.
"""
