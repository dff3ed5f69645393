"""
$ref resolution for OpenAPI documents.

Replaces every local ``$ref`` node with a copy of its target, recursively.
Self-referential schemas are handled by tracking the refs on the active
recursion path: when a ref is met again before its first expansion has
finished, the referencing node is returned with ``$ref`` stripped, which
breaks the cycle without expanding it further.

Resolved targets are cached per resolver instance and handed out as deep
copies, because later stages mutate the resolved tree in place.

Only in-document references (``#/...``) are supported.

Usage:
    resolved = SpecResolver(spec_dict).resolve()
"""

from __future__ import annotations

import copy
import logging
from typing import Any
from urllib.parse import unquote

from restwright.errors import SpecResolutionError

logger = logging.getLogger(__name__)

_MISSING = object()


class SpecResolver:
    """
    Single-use $ref resolver for one OpenAPI document.

    The cache lives on the instance, so separate documents (or separate
    resolutions of the same document) never share state.

    Example:
        resolver = SpecResolver(spec)
        resolved = resolver.resolve()
        schema = resolver.resolve_ref("#/components/schemas/Pet")
    """

    def __init__(self, document: dict[str, Any]):
        self._document = document
        self._resolved_cache: dict[str, Any] = {}

    def resolve(self) -> dict[str, Any]:
        """
        Resolve the whole document.

        Returns:
            A new document with local references expanded

        Raises:
            SpecResolutionError: External or dangling reference
        """
        resolved = self._resolve_node(self._document, frozenset())
        logger.debug(
            f"[spec_resolver] Resolved document ({len(self._resolved_cache)} distinct refs)"
        )
        return resolved

    def resolve_ref(self, ref: str) -> Any:
        """Resolve a single reference string against the document."""
        return self._resolve_node({"$ref": ref}, frozenset())

    def _resolve_node(self, node: Any, seen_refs: frozenset[str]) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                return self._resolve_reference(node, ref, seen_refs)
            return {key: self._resolve_node(value, seen_refs) for key, value in node.items()}

        if isinstance(node, list):
            return [self._resolve_node(item, seen_refs) for item in node]

        return node

    def _resolve_reference(
        self, node: dict[str, Any], ref: str, seen_refs: frozenset[str]
    ) -> Any:
        if ref in self._resolved_cache:
            return copy.deepcopy(self._resolved_cache[ref])

        if ref in seen_refs:
            logger.debug(f"[spec_resolver] Breaking reference cycle at {ref}")
            return {key: value for key, value in node.items() if key != "$ref"}

        target = self._lookup(ref)
        resolved = self._resolve_node(target, seen_refs | {ref})
        self._resolved_cache[ref] = resolved
        return copy.deepcopy(resolved)

    def _lookup(self, ref: str) -> Any:
        """Follow a ``#/a/b/c`` JSON pointer inside the root document."""
        if ref == "#":
            return self._document
        if not ref.startswith("#/"):
            raise SpecResolutionError(ref, "external references are not supported")

        current: Any = self._document
        for raw_part in ref[2:].split("/"):
            part = unquote(raw_part).replace("~1", "/").replace("~0", "~")
            value = _MISSING
            if isinstance(current, dict):
                value = current.get(part, _MISSING)
            elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
                value = current[int(part)]
            if value is _MISSING:
                raise SpecResolutionError(ref, f"'{part}' not found in document")
            current = value

        return current
