"""
Composite resolution endpoints.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from detail_composite.api.deps import get_cache, get_composite_service
from detail_composite.core.logging import get_logger
from detail_composite.domain.context import BoundContext
from detail_composite.repositories.cache_repo import EnvironmentConfigCache
from detail_composite.services.composite_service import CompositeService

logger = get_logger(__name__)

router = APIRouter()


class ResolveRequest(BaseModel):
    """Request to resolve a composite value for one record."""

    config_json: str = Field(..., description="Raw control configuration JSON")
    entity_id: str = Field(..., description="Id of the bound record")
    entity_name: str = Field(..., description="Logical name of the bound entity")
    bound_field: Optional[str] = Field(
        default=None, description="Field the value is written to, used for truncation"
    )


class ResolveResponse(BaseModel):
    """Resolved composite value."""

    value: str
    source: str
    target: str
    fields: list[str]
    record_found: bool
    auto_save: bool
    max_length: Optional[int] = None


@router.post("/composite/resolve", response_model=ResolveResponse)
async def resolve_composite(
    request: ResolveRequest,
    service: CompositeService = Depends(get_composite_service),
) -> ResolveResponse:
    """
    Resolve a configuration against a record.

    Engine errors propagate to the application error handler, which
    returns their code and status.
    """
    context = BoundContext.from_host(
        request.config_json,
        entity_ids=(request.entity_id,),
        entity_names=(request.entity_name,),
        bound_field=request.bound_field,
    )
    result = await service.resolve(context.request, context.bound_field)

    return ResolveResponse(
        value=result.value,
        source=result.plan.source,
        target=result.plan.target,
        fields=list(result.plan.fields),
        record_found=result.record_found,
        auto_save=result.auto_save,
        max_length=result.max_length,
    )


@router.delete("/composite/cache")
async def clear_cache(
    cache: EnvironmentConfigCache = Depends(get_cache),
) -> dict[str, Any]:
    """Drop cached environment variable configurations."""
    stats = cache.get_stats()
    cache.clear()
    return {"cleared": stats["total_entries"]}
