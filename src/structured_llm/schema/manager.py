"""Schema registry with loading from directories, URLs and runtime registration."""

import json
import logging
from pathlib import Path
from typing import Any

import requests

from structured_llm.exceptions import SchemaException, SchemaNotFoundException
from structured_llm.schema.guard import ensure_valid_schema

logger = logging.getLogger(__name__)


class SchemaManager:
    """Resolves schema names to screened schema documents.

    Supports loading schemas from:
    - Local files in configured directories
    - URLs with caching
    - Runtime registration

    Every document is screened with ``ensure_valid_schema`` before it is cached, so
    anything returned by the manager is safe to compile.
    """

    def __init__(
        self,
        schema_directories: list[str] | None = None,
        request_timeout: float = 10.0,
    ) -> None:
        """Initialize SchemaManager.

        Args:
            schema_directories: Directories to search for schema files.
                               Defaults to ['schemas/'] if None.
            request_timeout: Timeout in seconds for URL fetches.
        """
        self.schema_directories = schema_directories or ["schemas/"]
        self.request_timeout = request_timeout
        self._schema_cache: dict[str, dict[str, Any]] = {}
        self._url_cache: dict[str, dict[str, Any]] = {}

    def resolve(self, schema_input: str | dict[str, Any]) -> dict[str, Any]:
        """Return a screened schema document for a name, URL or document.

        Args:
            schema_input: Schema document, registered/file schema name, or
                an http(s) URL

        Returns:
            JSON schema as dictionary

        Raises:
            SchemaException: If the schema is invalid or cannot be found
        """
        if isinstance(schema_input, dict):
            self._validate_schema(schema_input)
            return schema_input

        name = str(schema_input)
        if name.startswith(("http://", "https://")):
            return self.load_schema_from_url(name)
        return self.load_schema(name)

    def load_schema(self, schema_name: str) -> dict[str, Any]:
        """Load a JSON schema by name.

        Args:
            schema_name: Name of the schema (without .json extension)

        Returns:
            JSON schema as dictionary

        Raises:
            SchemaNotFoundException: If schema cannot be found
            SchemaException: If the schema file is not valid
        """
        if schema_name in self._schema_cache:
            return self._schema_cache[schema_name]

        for directory in self.schema_directories:
            schema_path = Path(directory) / f"{schema_name}.json"
            if schema_path.exists():
                try:
                    with open(schema_path, encoding="utf-8") as f:
                        schema_dict = json.load(f)
                except (json.JSONDecodeError, OSError) as e:
                    raise SchemaException(
                        f"Invalid schema file {schema_path}: {e}",
                        schema=schema_name,
                        reason="invalid",
                    ) from e

                self._validate_schema(schema_dict)
                self._schema_cache[schema_name] = schema_dict
                logger.debug("Loaded schema %s from %s", schema_name, schema_path)
                return schema_dict

        raise SchemaNotFoundException(
            f"Schema '{schema_name}' not found in directories: {self.schema_directories}",
            schema=schema_name,
            reason="not_found",
        )

    def load_schema_from_url(self, url: str) -> dict[str, Any]:
        """Load a JSON schema from a URL.

        Args:
            url: URL to fetch schema from

        Returns:
            JSON schema as dictionary

        Raises:
            SchemaException: If URL fetch or schema validation fails
        """
        if url in self._url_cache:
            return self._url_cache[url]

        try:
            response = requests.get(url, timeout=self.request_timeout)
            response.raise_for_status()
            schema_dict = response.json()
        except requests.RequestException as e:
            raise SchemaException(
                f"Failed to fetch schema from {url}: {e}", schema=url, reason="fetch"
            ) from e
        except ValueError as e:
            raise SchemaException(
                f"Invalid JSON schema from {url}: {e}", schema=url, reason="invalid"
            ) from e

        self._validate_schema(schema_dict)
        self._url_cache[url] = schema_dict
        return schema_dict

    def register_schema(self, name: str, schema_dict: dict[str, Any]) -> None:
        """Register a schema at runtime.

        Args:
            name: Name to register schema under
            schema_dict: JSON schema as dictionary

        Raises:
            SchemaException: If schema is invalid
        """
        self._validate_schema(schema_dict)
        self._schema_cache[name] = schema_dict

    def list_available_schemas(self) -> list[str]:
        """List all available schemas.

        Returns:
            List of schema names
        """
        schema_names = set()

        for directory in self.schema_directories:
            dir_path = Path(directory)
            if dir_path.exists():
                for schema_file in dir_path.glob("*.json"):
                    schema_names.add(schema_file.stem)

        schema_names.update(self._schema_cache.keys())

        return sorted(schema_names)

    def _validate_schema(self, schema_dict: Any) -> None:
        ensure_valid_schema(schema_dict)
