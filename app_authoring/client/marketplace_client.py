"""Async marketplace data-service client using httpx.

Application types, developers and app creation go through the GraphQL
endpoint; app versions are read and updated over REST.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from app_authoring.client.config import Settings
from app_authoring.errors import LookupFailure, ServiceError, SubmissionFailure

logger = logging.getLogger("app_authoring.client")

# ---------------------------------------------------------------------------
# GraphQL documents
# ---------------------------------------------------------------------------

_GET_APP_TYPES = """
query getAppTypes($pageNumber: Int, $limit: Int, $enabled: Boolean) {
  getAppTypes(pageNumber: $pageNumber, limit: $limit, enabled: $enabled) {
    list { id }
  }
}
"""

# fieldDefinitions is a JSON scalar: the whole nested tree comes back as-is.
_GET_APP_TYPE = """
query getAppType($id: String!) {
  getAppType(id: $id) {
    id
    fieldDefinitions
  }
}
"""

_GET_DEVELOPERS = """
query getDevelopers($searchText: String, $pageNumber: Int, $limit: Int) {
  getDevelopers(searchText: $searchText, pageNumber: $pageNumber, limit: $limit) {
    list { developerId }
  }
}
"""

_CREATE_APP = """
mutation createApp($body: CreateAppRequest!) {
  createApp(body: $body) {
    appId
  }
}
"""


class MarketplaceClient:
    """Thin async wrapper around the marketplace data service."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            headers=settings.headers,
            timeout=httpx.Timeout(settings.timeout, connect=10.0),
        )

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get(self, path: str, params: dict | None = None) -> Any:
        try:
            r = await self._client.get(path, params=params)
            r.raise_for_status()
            return r.json()
        except httpx.HTTPStatusError as e:
            logger.error("GET %s -> %s", path, e.response.status_code)
            return {
                "error": f"HTTP {e.response.status_code}",
                "detail": e.response.text,
                "status_code": e.response.status_code,
            }
        except Exception as e:
            logger.error("GET %s failed: %s", path, e)
            return {"error": str(e)}

    async def _post(self, path: str, payload: dict | None = None) -> Any:
        try:
            r = await self._client.post(path, json=payload or {})
            r.raise_for_status()
            return r.json() if r.text.strip() else {"success": True}
        except httpx.HTTPStatusError as e:
            logger.error("POST %s -> %s", path, e.response.status_code)
            return {
                "error": f"HTTP {e.response.status_code}",
                "detail": e.response.text,
                "status_code": e.response.status_code,
            }
        except Exception as e:
            logger.error("POST %s failed: %s", path, e)
            return {"error": str(e)}

    async def _put(self, path: str, payload: dict | None = None) -> Any:
        try:
            r = await self._client.put(path, json=payload or {})
            r.raise_for_status()
            return r.json() if r.text.strip() else {"success": True}
        except httpx.HTTPStatusError as e:
            logger.error("PUT %s -> %s", path, e.response.status_code)
            return {
                "error": f"HTTP {e.response.status_code}",
                "detail": e.response.text,
                "status_code": e.response.status_code,
            }
        except Exception as e:
            logger.error("PUT %s failed: %s", path, e)
            return {"error": str(e)}

    async def _graphql(self, query: str, variables: dict[str, Any]) -> Any:
        """POST a GraphQL document; returns `data`, or an error dict."""
        result = await self._post(self._settings.graphql_url, {"query": query, "variables": variables})
        if isinstance(result, dict) and "error" in result:
            return result
        if not isinstance(result, dict):
            logger.error("GraphQL response is not an object: %r", result)
            return {"error": "unexpected response", "detail": str(result)}
        errors = result.get("errors")
        if errors:
            logger.error("GraphQL errors: %s", errors)
            return {"error": "GraphQL error", "detail": json.dumps(errors, default=str)}
        data = result.get("data") or {}
        if not isinstance(data, dict):
            logger.error("GraphQL data is not an object: %r", data)
            return {"error": "unexpected response", "detail": str(data)}
        return data

    @staticmethod
    def _unwrap(result: Any, operation: str, exc_type: type[ServiceError]) -> Any:
        """Raise `exc_type` for an error dict, otherwise return `result`."""
        if isinstance(result, dict) and "error" in result:
            message = result["error"]
            if result.get("detail"):
                message = f"{message} {result['detail']}"
            raise exc_type(operation, message, result.get("status_code"))
        return result

    # ==================================================================
    # SYSTEM
    # ==================================================================

    async def ping(self) -> Any:
        try:
            r = await self._client.get("/ping")
            return {"status": r.text.strip()}
        except Exception as e:
            return {"error": str(e)}

    # ==================================================================
    # APPLICATION TYPES
    # ==================================================================

    async def list_app_types(self, page: int, page_size: int, only_enabled: bool) -> list[dict[str, Any]]:
        data = self._unwrap(
            await self._graphql(_GET_APP_TYPES, {"pageNumber": page, "limit": page_size, "enabled": only_enabled}),
            "list_app_types",
            LookupFailure,
        )
        return ((data.get("getAppTypes") or {}).get("list")) or []

    async def get_app_type(self, type_id: str) -> dict[str, Any]:
        data = self._unwrap(
            await self._graphql(_GET_APP_TYPE, {"id": type_id}),
            "get_app_type",
            LookupFailure,
        )
        app_type = data.get("getAppType") or {}
        return {"fields": app_type.get("fieldDefinitions") or []}

    # ==================================================================
    # DEVELOPERS
    # ==================================================================

    async def search_developers(self, query: str, page: int, page_size: int) -> list[dict[str, Any]] | None:
        data = self._unwrap(
            await self._graphql(_GET_DEVELOPERS, {"searchText": query, "pageNumber": page, "limit": page_size}),
            "search_developers",
            LookupFailure,
        )
        return (data.get("getDevelopers") or {}).get("list")

    # ==================================================================
    # APPS
    # ==================================================================

    async def create_app(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = self._unwrap(
            await self._graphql(_CREATE_APP, {"body": payload}),
            "create_app",
            SubmissionFailure,
        )
        created = data.get("createApp") or {}
        if not created.get("appId"):
            return {}
        return {"id": created["appId"]}

    async def get_app_version(self, record_id: str, version: int) -> dict[str, Any] | None:
        result = await self._get(f"/apps/{record_id}/versions/{version}")
        if isinstance(result, dict) and result.get("status_code") == 404:
            return None
        if result and not isinstance(result, dict):
            logger.error("GET app version %s/%s: response is not an object: %r", record_id, version, result)
            result = {"error": "unexpected response", "detail": str(result)}
        return self._unwrap(result, "get_app_version", LookupFailure) or None

    async def update_app_version(self, record_id: str, version: int, payload: dict[str, Any]) -> bool:
        result = self._unwrap(
            await self._put(f"/apps/{record_id}/versions/{version}", payload),
            "update_app_version",
            SubmissionFailure,
        )
        return bool(result)
