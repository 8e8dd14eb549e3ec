"""The marketplace data service, as seen by the authoring core.

Implementations raise LookupFailure from read operations and
SubmissionFailure from write operations. MarketplaceClient is the HTTP
implementation; tests substitute AsyncMock objects with the same methods.
"""

from __future__ import annotations

from typing import Any, Protocol


class MarketplaceService(Protocol):
    async def list_app_types(self, page: int, page_size: int, only_enabled: bool) -> list[dict[str, Any]]:
        """Application types, each at least {"id": ...}."""
        ...

    async def get_app_type(self, type_id: str) -> dict[str, Any]:
        """{"fields": [wire field definitions]} for one application type."""
        ...

    async def get_app_version(self, record_id: str, version: int) -> dict[str, Any] | None:
        """{"type", "name", "safeName", "customData"}, or None when absent."""
        ...

    async def search_developers(self, query: str, page: int, page_size: int) -> list[dict[str, Any]] | None:
        """Matching developers, each {"developerId": ...}; None when the list is missing."""
        ...

    async def create_app(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create an app; returns {"id": ...}."""
        ...

    async def update_app_version(self, record_id: str, version: int, payload: dict[str, Any]) -> bool:
        """Update one app version; falsy means the update was rejected."""
        ...
