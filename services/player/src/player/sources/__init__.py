"""
Content source implementations for the CallSync player.

Contains the abstract ContentSource base class and the in-memory,
filesystem and HTTP implementations the player can fetch documents
through.
"""

from .base import ContentSource
from .file_source import FileContentSource
from .http_source import HttpContentSource
from .memory_source import InMemoryContentSource

__all__ = [
    "ContentSource",
    "FileContentSource",
    "HttpContentSource",
    "InMemoryContentSource",
]
