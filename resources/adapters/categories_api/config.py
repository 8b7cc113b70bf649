"""Pydantic settings for the categories API adapter."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.catalog_shared.config import CatalogSettings, resolve_component_settings
from resources.adapters.categories_api.component import RESOURCE_COMPONENT_ID


class CategoriesApiSettings(BaseModel):
    """Runtime settings for the categories backend."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = "http://127.0.0.1:3000"
    timeout_seconds: float = Field(default=10.0, gt=0)
    auth_token: str = ""
    follow_redirects: bool = False

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: object) -> object:
        """Reject blank base URLs and drop any trailing slash."""
        if isinstance(value, str):
            normalized = value.strip().rstrip("/")
            if normalized == "":
                raise ValueError("base_url must be non-empty")
            return normalized
        return value

    def request_headers(self) -> dict[str, str]:
        """Return default headers sent with every request."""
        headers = {"Accept": "application/json"}
        if self.auth_token.strip() != "":
            headers["Authorization"] = f"Bearer {self.auth_token.strip()}"
        return headers


def resolve_categories_api_settings(
    settings: CatalogSettings,
) -> CategoriesApiSettings:
    """Resolve adapter settings from ``components.adapter.categories_api``."""
    return resolve_component_settings(
        settings=settings,
        component_id=RESOURCE_COMPONENT_ID,
        model=CategoriesApiSettings,
    )
