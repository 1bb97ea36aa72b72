"""bagdb: CRUD over schema-less document collections.

Callers put and get plain JSON-like documents through a
:class:`DocumentStore`; equality criteria are translated to backend filters,
backend identity fields are masked from results, and clients are pooled per
endpoint by an :class:`EndpointRegistry`.
"""

from __future__ import annotations

from .backends import InMemoryBackend, MongoBackend
from .collection import CollectionHandle
from .config import LOCALHOST_DEFAULT, StoreConfiguration
from .documents import (
    ID_FIELD,
    exclude_field,
    parse_document,
    serialize_document,
)
from .exceptions import (
    BackendOperationError,
    BagDbError,
    ConfigurationError,
    StoreConnectionError,
    TranslationError,
)
from .factory import DocumentStoreFactory
from .ports import ICollection, IDocumentBackend
from .projector import project, project_many
from .registry import EndpointRegistry
from .store import DocumentStore
from .translator import translate

__all__ = [
    # Core
    "DocumentStore",
    "DocumentStoreFactory",
    "CollectionHandle",
    "EndpointRegistry",
    "StoreConfiguration",
    "LOCALHOST_DEFAULT",
    # Backends
    "ICollection",
    "IDocumentBackend",
    "InMemoryBackend",
    "MongoBackend",
    # Utilities
    "ID_FIELD",
    "translate",
    "project",
    "project_many",
    "parse_document",
    "serialize_document",
    "exclude_field",
    # Exceptions
    "BagDbError",
    "ConfigurationError",
    "StoreConnectionError",
    "TranslationError",
    "BackendOperationError",
]
