from .memory import InMemoryBackend, InMemoryClient, InMemoryCollection
from .mongo import MongoBackend

__all__ = [
    "InMemoryBackend",
    "InMemoryClient",
    "InMemoryCollection",
    "MongoBackend",
]
