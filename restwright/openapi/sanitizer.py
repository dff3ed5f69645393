"""
Schema type sanitization.

Specs in the wild carry types such as ``"Any"``, ``"String"`` or vendor
pseudo-types. Instead of rejecting the document, every ``type`` field at
or beneath a ``schema``/``schemas`` key is normalized:

- string type: lower-cased; dropped if not a JSON Schema type
- list type: valid entries kept (lower-cased, deduplicated, in order);
  dropped entirely if none remain
"""

from __future__ import annotations

import logging
from typing import Any

from .schema import VALID_SCHEMA_TYPES

logger = logging.getLogger(__name__)

SCHEMA_CONTAINER_KEYS = frozenset({"schema", "schemas"})


def sanitize_type_field(schema: dict[str, Any]) -> None:
    """Normalize the ``type`` field of a single schema dict in place."""
    if "type" not in schema:
        return

    # Other values (a property named "type" in a properties map) are left alone
    type_value = schema["type"]

    if isinstance(type_value, str):
        normalized = type_value.lower()
        if normalized in VALID_SCHEMA_TYPES:
            schema["type"] = normalized
        else:
            logger.debug(f"[sanitizer] Dropping invalid schema type {type_value!r}")
            del schema["type"]
        return

    if isinstance(type_value, list):
        valid: list[str] = []
        for entry in type_value:
            if not isinstance(entry, str):
                continue
            normalized = entry.lower()
            if normalized in VALID_SCHEMA_TYPES and normalized not in valid:
                valid.append(normalized)
        if valid:
            schema["type"] = valid
        else:
            del schema["type"]


def sanitize_schema_types(document: Any, in_schema: bool = False) -> Any:
    """
    Recursively sanitize schema types, mutating and returning ``document``.

    Args:
        document: Resolved OpenAPI document (or any sub-tree)
        in_schema: Whether ``document`` already sits beneath a schema key
    """
    if isinstance(document, dict):
        if in_schema:
            sanitize_type_field(document)
        for key, value in document.items():
            document[key] = sanitize_schema_types(
                value, in_schema or key in SCHEMA_CONTAINER_KEYS
            )
        return document

    if isinstance(document, list):
        return [sanitize_schema_types(item, in_schema) for item in document]

    return document
