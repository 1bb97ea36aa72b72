"""StoreConfiguration: the JSON-shaped document that names collections to open."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import ConfigurationError

LOCALHOST_DEFAULT = "mongodb://localhost:27017"


class StoreConfiguration(BaseModel):
    """Immutable, validated configuration document.

    Recognised options (camelCase, as they appear in JSON)::

        {
            "collectionName": "orders",            # the collection to open
            "connectionString": "mongodb://...",   # default: local server
            "databaseName": "shop",                # default: collectionName
            "collectionNames": ["orders", "lines"] # several under one database
        }

    At least one of ``collectionName``/``collectionNames`` is required, and
    ``databaseName`` is required when only ``collectionNames`` is given.
    Unrecognised keys are ignored.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    collection_name: str | None = Field(default=None, alias="collectionName")
    connection_string: str = Field(
        default=LOCALHOST_DEFAULT, alias="connectionString", min_length=1
    )
    database_name: str | None = Field(default=None, alias="databaseName")
    collection_names: tuple[str, ...] = Field(default=(), alias="collectionNames")

    @model_validator(mode="after")
    def _require_collection(self) -> StoreConfiguration:
        if not self.collection_name and not self.collection_names:
            raise ValueError("missing 'collectionName'")
        if any(not name for name in self.collection_names):
            raise ValueError("'collectionNames' must not contain empty names")
        if not self.collection_name and not self.database_name:
            raise ValueError(
                "'databaseName' is required when only 'collectionNames' is given"
            )
        return self

    @property
    def resolved_database_name(self) -> str:
        return self.database_name or self.collection_name or ""

    @property
    def resolved_collection_names(self) -> tuple[str, ...]:
        """``collectionName`` first, then ``collectionNames``, without repeats."""
        names = (self.collection_name, *self.collection_names)
        return tuple(dict.fromkeys(name for name in names if name))

    @classmethod
    def parse(
        cls, configuration: StoreConfiguration | Mapping[str, Any] | str
    ) -> StoreConfiguration:
        """Validate a mapping or JSON text.

        Raises:
            ConfigurationError: a required option is missing or invalid.
        """
        if isinstance(configuration, cls):
            return configuration
        try:
            if isinstance(configuration, str):
                return cls.model_validate_json(configuration)
            return cls.model_validate(configuration)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
