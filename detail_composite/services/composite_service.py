"""
Composite service: one run of the resolution pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from detail_composite.clients.interfaces import FieldMetadataProvider, RecordStore
from detail_composite.composition.builder import build_composite, build_from_template
from detail_composite.composition.planner import QueryPlan, build_query_plan
from detail_composite.composition.resolver import ConfigResolver
from detail_composite.composition.rows import collect_field_names, normalize_rows
from detail_composite.composition.truncation import truncate
from detail_composite.core.exceptions import (
    ConfigMissingError,
    ContextMissingError,
    DetailCompositeError,
    FetchError,
)
from detail_composite.core.logging import get_logger
from detail_composite.domain.composite_config import CompositeConfig
from detail_composite.domain.context import RequestContext

logger = get_logger(__name__)


@dataclass
class CompositeResult:
    """Outcome of one resolution."""

    value: str
    config: CompositeConfig
    plan: QueryPlan
    record_found: bool
    max_length: Optional[int] = None

    @property
    def auto_save(self) -> bool:
        return self.config.auto_save


class CompositeService:
    """
    Resolves a configuration against a bound record into the composite string.

    Stateless apart from the resolver's environment cache; staleness and
    saving are the coordinator's concern.
    """

    def __init__(
        self,
        record_store: RecordStore,
        resolver: ConfigResolver,
        field_metadata: Optional[FieldMetadataProvider] = None,
    ) -> None:
        """
        Initialize the composite service.

        Args:
            record_store: Record retrieval backend
            resolver: Configuration resolver (owns the environment cache)
            field_metadata: Provider of the bound field's max length
        """
        self.record_store = record_store
        self.resolver = resolver
        self.field_metadata = field_metadata

    async def resolve(
        self,
        request: RequestContext,
        bound_field: Optional[str] = None,
    ) -> CompositeResult:
        """
        Run the pipeline for one (config, entity id, entity name) triple.

        Args:
            request: Identity of the computation
            bound_field: Field the value is written to, used for max length

        Returns:
            Composite result

        Raises:
            DetailCompositeError: Any configuration, context or fetch failure
        """
        if not request.config_raw.strip():
            raise ConfigMissingError()
        if not request.entity_id.strip():
            raise ContextMissingError("entity_id")
        if not request.entity_name.strip():
            raise ContextMissingError("entity_name")

        config = await self.resolver.resolve(request.config_raw)

        rows = normalize_rows(config)
        fields = collect_field_names(rows, config.template)
        plan = build_query_plan(config, fields, request.entity_id, request.entity_name)

        record = await self.fetch_record(plan, request.entity_id)
        max_length = await self.get_max_length(plan.target, bound_field)

        composite = ""
        if record:
            if config.template:
                composite = build_from_template(record, config.template, rows)
            else:
                composite = build_composite(record, rows, config.separator)

        composite = truncate(composite, max_length, config.truncate_with)

        logger.info(
            "Composite resolved",
            source=plan.source,
            target=plan.target,
            fields=len(plan.fields),
            record_found=bool(record),
            length=len(composite),
        )

        return CompositeResult(
            value=composite,
            config=config,
            plan=plan,
            record_found=bool(record),
            max_length=max_length,
        )

    async def fetch_record(self, plan: QueryPlan, entity_id: str) -> Optional[dict[str, Any]]:
        """Fetch the single record the composite is built from."""
        try:
            if plan.is_same_entity:
                return await self.record_store.retrieve_record(
                    plan.source, entity_id, plan.select_options()
                )

            records = await self.record_store.retrieve_multiple_records(
                plan.source, plan.query_options()
            )
            return records[0] if records else None

        except DetailCompositeError:
            raise
        except Exception as e:
            raise FetchError(
                f"Failed to retrieve {plan.source}: {e}",
                details={"entity": plan.source},
            ) from e

    async def get_max_length(self, entity_name: str, field_name: Optional[str]) -> Optional[int]:
        """Positive max length of the bound field, if known."""
        if self.field_metadata is None or not field_name:
            return None

        try:
            max_length = await self.field_metadata.get_max_length(entity_name, field_name)
        except DetailCompositeError as e:
            logger.warning(
                "Max length lookup failed, output left untruncated",
                entity=entity_name,
                field=field_name,
                error=e.message,
            )
            return None

        if isinstance(max_length, int) and max_length > 0:
            return max_length
        return None
