"""
Request Builder.

Maps tool arguments (keyed by ``py_name``) onto an HTTP request:

    path    ->  {placeholder} substitution (percent-encoded)
    query   ->  ?k=v&k2=v2 (null values omitted)
    header  ->  request headers
    cookie  ->  one ``Cookie: k=v; k2=v2`` header
    body    ->  serialized by the operation's first request media type

Every request carries ``User-Agent: restwright (tool: <name>)``; no other
header source can override it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import quote, urlencode

from .common import ApiParameter, OperationEndpoint, ParamLocation
from .operation_parser import first_media_type
from .schema import ArraySchema, ObjectSchema, schema_from_dict

logger = logging.getLogger(__name__)

USER_AGENT_HEADER = "User-Agent"


@dataclass(frozen=True, slots=True)
class PreparedRequest:
    """A fully assembled HTTP request, ready to send."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str | bytes | None = None


def to_wire_value(value: Any) -> str:
    """Render a scalar for a URL, header or cookie (booleans as true/false)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _query_pairs(name: str, value: Any) -> list[tuple[str, str]]:
    if isinstance(value, (list, tuple)):
        return [(name, to_wire_value(v)) for v in value if v is not None]
    return [(name, to_wire_value(value))]


def _set_header(headers: dict[str, str], name: str, value: str) -> None:
    """Set a header unless it is the User-Agent."""
    if name.lower() == USER_AGENT_HEADER.lower():
        logger.debug(f"[request_builder] Ignoring attempt to override {USER_AGENT_HEADER}")
        return
    headers[name] = value


class RequestBuilder:
    """
    Builds PreparedRequest objects for one operation.

    Example:
        builder = RequestBuilder(endpoint, operation, "get_user")
        request = builder.build(parameters, {"user_id": "42"})
        request.url  # "https://api.example.com/users/42"
    """

    def __init__(
        self,
        endpoint: OperationEndpoint,
        operation: dict[str, Any],
        tool_name: str,
        default_headers: Mapping[str, str] | None = None,
        user_agent_prefix: str = "restwright",
    ):
        self.endpoint = endpoint
        self.operation = operation
        self.tool_name = tool_name
        self.default_headers = dict(default_headers or {})
        self.user_agent = f"{user_agent_prefix} (tool: {tool_name})"

    def build(
        self,
        parameters: list[ApiParameter],
        kwargs: Mapping[str, Any],
        extra_headers: Mapping[str, str] | None = None,
    ) -> PreparedRequest:
        """
        Assemble the request.

        Args:
            parameters: Operation parameters plus any auth parameter
            kwargs: Argument values keyed by ``py_name``
            extra_headers: Header-provider and per-request headers
        """
        path_values: dict[str, str] = {}
        query: list[tuple[str, str]] = []
        header_values: dict[str, str] = {}
        cookies: list[str] = []
        body_values: dict[str, Any] = {}

        for param in parameters:
            if param.py_name not in kwargs:
                continue
            value = kwargs[param.py_name]
            location = param.param_location

            if location == ParamLocation.PATH:
                path_values[param.original_name] = quote(to_wire_value(value), safe="")
            elif value is None:
                continue
            elif location == ParamLocation.QUERY:
                query.extend(_query_pairs(param.original_name, value))
            elif location == ParamLocation.HEADER:
                header_values[param.original_name] = to_wire_value(value)
            elif location == ParamLocation.COOKIE:
                cookies.append(f"{param.original_name}={to_wire_value(value)}")
            elif location == ParamLocation.BODY:
                body_values[param.original_name] = value

        body = self._collect_body(body_values)

        url = self._build_url(path_values)
        if query:
            url = f"{url}?{urlencode(query)}"

        # Later sources win: parameters, then caller defaults, then context headers
        headers: dict[str, str] = {}
        for source in (header_values, self.default_headers, extra_headers or {}):
            for name, value in source.items():
                _set_header(headers, name, value)
        if cookies:
            headers["Cookie"] = "; ".join(cookies)

        encoded_body, content_type = self._encode_body(body)
        if encoded_body is not None and content_type:
            headers["Content-Type"] = content_type

        headers[USER_AGENT_HEADER] = self.user_agent

        return PreparedRequest(
            method=self.endpoint.method.upper(),
            url=url,
            headers=headers,
            body=encoded_body,
        )

    def _build_url(self, path_values: dict[str, str]) -> str:
        path = self.endpoint.path
        for name, value in path_values.items():
            path = path.replace(f"{{{name}}}", value)

        if "{" in path and "}" in path:
            logger.warning(
                f"[request_builder] Unfilled path placeholder in {path} for tool {self.tool_name}"
            )

        base_url = self.endpoint.base_url.rstrip("/")
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{base_url}{path}"

    def _request_media(self) -> tuple[str, dict[str, Any]] | None:
        request_body = self.operation.get("requestBody")
        return first_media_type(
            request_body.get("content") if isinstance(request_body, dict) else None
        )

    def _collect_body(self, body_values: dict[str, Any]) -> Any:
        """Shape body arguments by the first media type's schema."""
        if not body_values:
            return None

        media = self._request_media()
        node = schema_from_dict(media[1].get("schema", {}) if media else {})
        if isinstance(node, ObjectSchema) and node.properties:
            return body_values
        if isinstance(node, ArraySchema):
            return body_values.get("array")
        return body_values.get("")

    def _encode_body(self, body: Any) -> tuple[str | bytes | None, str | None]:
        if body is None:
            return None, None

        media = self._request_media()
        media_type = media[0] if media else "application/json"
        base_type = media_type.split(";", 1)[0].strip().lower()

        if base_type == "application/json" or base_type.endswith("+json"):
            return json.dumps(body), media_type
        if base_type == "application/x-www-form-urlencoded":
            if isinstance(body, Mapping):
                return urlencode({k: to_wire_value(v) for k, v in body.items() if v is not None}), media_type
            return to_wire_value(body), media_type
        if base_type == "text/plain":
            return to_wire_value(body), media_type
        if isinstance(body, (bytes, str)):
            return body, media_type

        logger.debug(f"[request_builder] Encoding {media_type} body as JSON")
        return json.dumps(body), media_type
