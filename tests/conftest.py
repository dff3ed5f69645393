"""
Pytest configuration and fixtures for restwright tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from restwright.openapi import ...` to work without installing
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from restwright.config import clear_all_feature_overrides, get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Feature overrides and cached settings never leak between tests."""
    get_settings.cache_clear()
    clear_all_feature_overrides()
    yield
    get_settings.cache_clear()
    clear_all_feature_overrides()


# =============================================================================
# Sample OpenAPI Specs
# =============================================================================


@pytest.fixture
def users_spec():
    """Spec with a path-level parameter, a query flag and a JSON body."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Users API", "version": "1.0.0"},
        "servers": [{"url": "https://api.example.com"}],
        "paths": {
            "/users/{user_id}": {
                "parameters": [
                    {
                        "name": "user_id",
                        "in": "path",
                        "required": True,
                        "schema": {"type": "string"},
                        "description": "User identifier",
                    }
                ],
                "get": {
                    "operationId": "getUser",
                    "summary": "Get a user",
                    "tags": ["users"],
                    "parameters": [
                        {
                            "name": "include_details",
                            "in": "query",
                            "schema": {"type": "boolean"},
                        }
                    ],
                    "responses": {
                        "200": {
                            "description": "The user",
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/User"}
                                }
                            },
                        },
                        "404": {"description": "Not found"},
                    },
                },
                "put": {
                    "operationId": "updateUser",
                    "tags": ["users"],
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/UserUpdate"}
                            }
                        },
                    },
                    "responses": {"204": {"description": "Updated"}},
                },
                "delete": {
                    "responses": {"204": {"description": "Deleted"}},
                },
            },
        },
        "components": {
            "schemas": {
                "User": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "name": {"type": "string"},
                    },
                },
                "UserUpdate": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {
                        "name": {"type": "string", "description": "Display name"},
                        "email": {"type": "string"},
                    },
                },
            },
        },
    }


@pytest.fixture
def tree_spec():
    """Spec with a self-referential schema."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Tree API", "version": "1.0.0"},
        "servers": [{"url": "https://trees.example.com"}],
        "paths": {
            "/nodes": {
                "post": {
                    "operationId": "createNode",
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/Node"}
                            }
                        }
                    },
                    "responses": {"201": {"description": "Created"}},
                }
            }
        },
        "components": {
            "schemas": {
                "Node": {
                    "type": "object",
                    "properties": {
                        "value": {"type": "integer"},
                        "children": {
                            "type": "array",
                            "items": {"$ref": "#/components/schemas/Node"},
                        },
                    },
                }
            }
        },
    }


@pytest.fixture
def oauth2_spec():
    """Spec whose operations require an OAuth2 authorization-code scheme."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Calendar API", "version": "2.0.0"},
        "servers": [{"url": "https://calendar.example.com/v2"}],
        "security": [{"oauth": ["events.read"]}],
        "paths": {
            "/events": {
                "get": {
                    "operationId": "listEvents",
                    "responses": {
                        "200": {
                            "description": "Events",
                            "content": {"application/json": {"schema": {"type": "array"}}},
                        }
                    },
                }
            },
            "/health": {
                "get": {
                    "operationId": "health",
                    "security": [],
                    "responses": {"200": {"description": "OK"}},
                }
            },
        },
        "components": {
            "securitySchemes": {
                "oauth": {
                    "type": "oauth2",
                    "flows": {
                        "authorizationCode": {
                            "authorizationUrl": "https://auth.example.com/authorize",
                            "tokenUrl": "https://auth.example.com/token",
                            "scopes": {"events.read": "Read events"},
                        }
                    },
                }
            }
        },
    }
