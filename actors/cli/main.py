"""Category cache CLI actor implemented with Typer."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import sys
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable

import typer
from pydantic import ValidationError

from packages.catalog_shared.config import CatalogSettings, load_settings
from packages.catalog_shared.envelope import EnvelopeMeta, Result, new_meta
from packages.catalog_shared.errors import ErrorCategory, ErrorDetail
from packages.catalog_shared.logging import configure_logging
from resources.adapters.categories_api import (
    CategoriesApi,
    CategoryRecord,
    CategoryStatus,
    HttpCategoriesApi,
    build_component as build_categories_api,
)
from services.state.category_cache import (
    CacheState,
    CategoryCacheService,
    ViewFilter,
    build_category_cache_service,
    derive_view,
)

SUCCESS_EXIT_CODE = 0
INTERNAL_ERROR_EXIT_CODE = 1
DOMAIN_ERROR_EXIT_CODE = 3
TRANSPORT_ERROR_EXIT_CODE = 4

_CLI_SOURCE = "actor_cli"

CacheOperation = Callable[
    [CategoryCacheService, EnvelopeMeta], Awaitable[Result[CacheState]]
]


@dataclass(frozen=True)
class CliConfig:
    """Global CLI runtime options applied to every command."""

    base_url: str | None
    timeout: float | None
    token: str | None
    as_json: bool
    config_path: Path | None


def _serialize(value: Any) -> Any:
    """Convert result objects to JSON-serializable structures."""

    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date, Decimal, Path)):
        return str(value)
    if isinstance(value, Enum):
        return _serialize(value.value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _serialize(dataclasses.asdict(value))
    if isinstance(value, dict):
        return {str(key): _serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_serialize(item) for item in value]
    if hasattr(value, "model_dump"):
        return _serialize(value.model_dump(mode="python"))
    return str(value)


def _emit_output(records: tuple[CategoryRecord, ...], as_json: bool) -> None:
    """Render category records in requested format."""

    if as_json:
        typer.echo(
            json.dumps(_serialize(records), sort_keys=True, separators=(",", ":"))
        )
        return
    typer.echo(_render_records(records))


def _emit_errors(errors: list[ErrorDetail], as_json: bool) -> None:
    """Render failed result errors to stderr."""

    if as_json:
        typer.echo(json.dumps({"errors": _serialize(errors)}), err=True)
        return
    for error in errors:
        typer.echo(f"error: {error.code}: {error.message}", err=True)


def _render_records(records: tuple[CategoryRecord, ...]) -> str:
    """Render records as aligned ``id  status  name`` rows."""
    if len(records) == 0:
        return "No categories found."
    width = max(len(str(record.id)) for record in records)
    return "\n".join(
        f"{str(record.id).rjust(width)}  "
        f"{record.effective_status.value:<8}  {record.name}"
        for record in records
    )


def _exit_code(errors: list[ErrorDetail]) -> int:
    """Map the most severe error category to a process exit code."""
    categories = {error.category for error in errors}
    if ErrorCategory.INTERNAL in categories:
        return INTERNAL_ERROR_EXIT_CODE
    if ErrorCategory.DEPENDENCY in categories:
        return TRANSPORT_ERROR_EXIT_CODE
    return DOMAIN_ERROR_EXIT_CODE


def _load_cli_settings(cfg: CliConfig) -> CatalogSettings:
    """Resolve root settings with global flags layered over env and YAML."""
    adapter: dict[str, Any] = {}
    if cfg.base_url is not None:
        adapter["base_url"] = cfg.base_url
    if cfg.timeout is not None:
        adapter["timeout_seconds"] = cfg.timeout
    if cfg.token is not None:
        adapter["auth_token"] = cfg.token

    overrides: dict[str, Any] = {}
    if adapter:
        overrides["components"] = {"adapter": {"categories_api": adapter}}
    return load_settings(config_path=cfg.config_path, **overrides)


def _build_api(settings: CatalogSettings) -> CategoriesApi:
    """Return the categories API adapter used by every command."""
    return build_categories_api(settings=settings)


async def _execute(
    settings: CatalogSettings, operation: CacheOperation
) -> Result[CacheState]:
    """Build the cache, run one operation, and release HTTP resources."""
    api = _build_api(settings)
    try:
        cache = build_category_cache_service(settings=settings, api=api)
        return await operation(cache, new_meta(source=_CLI_SOURCE))
    finally:
        if isinstance(api, HttpCategoriesApi):
            await api.aclose()


def _run_command(
    cfg: CliConfig,
    operation: CacheOperation,
    *,
    view_filter: ViewFilter | None = None,
) -> None:
    """Execute one cache operation and map outputs/errors to process semantics."""
    try:
        settings = _load_cli_settings(cfg)
        configure_logging(
            level=settings.logging.level,
            json_output=settings.logging.json_output,
            service=settings.logging.service,
            environment=settings.logging.environment,
            stream=sys.stderr,
        )
        result = asyncio.run(_execute(settings, operation))
    except ValidationError as exc:
        typer.echo(f"error: invalid configuration: {exc}", err=True)
        raise typer.Exit(code=DOMAIN_ERROR_EXIT_CODE) from exc

    if not result.ok or result.payload is None:
        _emit_errors(result.errors, cfg.as_json)
        raise typer.Exit(code=_exit_code(result.errors))

    _emit_output(derive_view(result.payload.records, view_filter), cfg.as_json)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


def _category_payload(name: str, status: str | None) -> dict[str, object]:
    """Build the raw category payload validated by the cache."""
    payload: dict[str, object] = {"name": name}
    if status is not None:
        payload["status"] = status
    return payload


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""

    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


app = typer.Typer(no_args_is_help=True, help="Categories collection client")


@app.callback()
def main(
    ctx: typer.Context,
    base_url: str | None = typer.Option(
        None, help="Categories API base URL (overrides config)"
    ),
    timeout: float | None = typer.Option(
        None, min=0.001, help="Request timeout in seconds"
    ),
    token: str | None = typer.Option(
        None, envvar="CATALOG_API_TOKEN", help="Bearer token for the categories API"
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
    config: Path | None = typer.Option(
        None, "--config", help="YAML config file path"
    ),
) -> None:
    """Store global options for all commands."""

    ctx.obj = CliConfig(
        base_url=base_url,
        timeout=timeout,
        token=token,
        as_json=as_json,
        config_path=config,
    )


@app.command("list")
def list_command(
    ctx: typer.Context,
    query: str = typer.Option("", help="Case-insensitive name substring"),
    status: CategoryStatus | None = typer.Option(
        None, case_sensitive=False, help="Only show records with this status"
    ),
) -> None:
    """Load every category and show the filtered view."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda cache, meta: cache.load(meta=meta),
        view_filter=ViewFilter(query=query, status_filter=status),
    )


@app.command("search")
def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Server-side search query"),
) -> None:
    """Search categories on the server."""
    cfg = _require_config(ctx)
    _run_command(cfg, lambda cache, meta: cache.search_remote(query=query, meta=meta))


@app.command("filter")
def filter_command(
    ctx: typer.Context,
    status: str = typer.Argument(..., help="Status to filter by (active/inactive)"),
) -> None:
    """Filter categories by status on the server."""
    cfg = _require_config(ctx)
    _run_command(
        cfg, lambda cache, meta: cache.filter_remote(status=status, meta=meta)
    )


@app.command("create")
def create_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Category name"),
    status: str | None = typer.Option(None, help="Initial status"),
) -> None:
    """Create one category and show the refreshed collection."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda cache, meta: cache.create(
            category=_category_payload(name, status), meta=meta
        ),
    )


@app.command("update")
def update_command(
    ctx: typer.Context,
    category_id: int = typer.Argument(..., metavar="ID", help="Category id"),
    name: str = typer.Argument(..., help="New category name"),
    status: str | None = typer.Option(None, help="New status"),
) -> None:
    """Update one category and show the refreshed collection."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda cache, meta: cache.update(
            category_id=category_id,
            category=_category_payload(name, status),
            meta=meta,
        ),
    )


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    category_id: int = typer.Argument(..., metavar="ID", help="Category id"),
) -> None:
    """Delete one category and show the refreshed collection."""
    cfg = _require_config(ctx)
    _run_command(
        cfg, lambda cache, meta: cache.delete(category_id=category_id, meta=meta)
    )


if __name__ == "__main__":
    app()
