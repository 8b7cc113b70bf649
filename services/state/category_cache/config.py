"""Pydantic settings for category cache behavior."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from packages.catalog_shared.config import CatalogSettings, resolve_component_settings
from services.state.category_cache.component import SERVICE_COMPONENT_ID

ReadOrdering = Literal["send_order", "completion_order"]


class CategoryCacheSettings(BaseModel):
    """Category cache runtime behavior settings.

    ``read_ordering`` decides which overlapping read wins:

    - ``send_order``: a response is applied only when its read was started
      after the read that produced the current records.
    - ``completion_order``: whichever response arrives last is applied.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    read_ordering: ReadOrdering = "send_order"
    source: str = "category_cache"


def resolve_category_cache_settings(
    settings: CatalogSettings,
) -> CategoryCacheSettings:
    """Resolve cache settings from ``components.service.category_cache``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=CategoryCacheSettings,
    )
