"""Marketplace data-service HTTP client."""

from app_authoring.client.config import Settings
from app_authoring.client.marketplace_client import MarketplaceClient

__all__ = ["MarketplaceClient", "Settings"]
