"""Tunables for schema resolution and the authoring session.

FormSettings reads environment variables (and a local .env) on instantiation:

  APP_AUTHORING_DEBOUNCE_MS       - quiescence window for typed input (default: 200)
  APP_AUTHORING_OWNER_PAGE_SIZE   - developer-id suggestions per lookup (default: 20)
  APP_AUTHORING_TYPE_PAGE_SIZE    - application types listed for selection (default: 100)
  APP_AUTHORING_MAX_SCHEMA_DEPTH  - deepest field nesting accepted (default: 64)
  APP_AUTHORING_DEFAULT_POLICY    - "truthy" | "presence" (default: truthy)
  APP_AUTHORING_FIELD_PREFIX      - data-bearing field path prefix (default: customData.)
  APP_AUTHORING_EXIT_ROUTE        - where the host navigates when a session ends
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app_authoring.form.merge import CUSTOM_DATA_PREFIX, DefaultPolicy
from app_authoring.form.models import DEFAULT_MAX_DEPTH


class FormSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    debounce_ms: int = Field(default=200, ge=0, validation_alias="APP_AUTHORING_DEBOUNCE_MS")
    owner_page_size: int = Field(default=20, ge=1, validation_alias="APP_AUTHORING_OWNER_PAGE_SIZE")
    type_page_size: int = Field(default=100, ge=1, validation_alias="APP_AUTHORING_TYPE_PAGE_SIZE")
    max_schema_depth: int = Field(
        default=DEFAULT_MAX_DEPTH, ge=1, validation_alias="APP_AUTHORING_MAX_SCHEMA_DEPTH"
    )
    default_policy: DefaultPolicy = Field(
        default=DefaultPolicy.TRUTHY, validation_alias="APP_AUTHORING_DEFAULT_POLICY"
    )
    field_prefix: str = Field(default=CUSTOM_DATA_PREFIX, validation_alias="APP_AUTHORING_FIELD_PREFIX")
    exit_route: str = Field(default="/app-list/list", validation_alias="APP_AUTHORING_EXIT_ROUTE")

    @field_validator("default_policy", mode="before")
    @classmethod
    def _lower_policy(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @classmethod
    def from_env(cls) -> FormSettings:
        return cls()
