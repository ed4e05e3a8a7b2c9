"""
Query planning for same-entity and related-entity retrieval.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from detail_composite.composition.literals import to_odata_literal
from detail_composite.core.exceptions import MissingJoinFieldError
from detail_composite.domain.composite_config import CompositeConfig


@dataclass(frozen=True)
class QueryPlan:
    """How to fetch the record a composite is built from."""

    target: str
    source: str
    fields: tuple[str, ...]
    filter: Optional[str] = None
    order_by: Optional[str] = None
    top: Optional[int] = None

    @property
    def is_same_entity(self) -> bool:
        return self.source == self.target

    def select_options(self) -> str:
        """Query options for retrieve-by-id."""
        return f"?$select={','.join(self.fields)}"

    def query_options(self) -> str:
        """
        Query options for a related-entity retrieval.

        Filter and order expressions are percent-encoded here and nowhere
        else.
        """
        options = self.select_options()
        if self.filter:
            options += f"&$filter={quote(self.filter, safe='')}"
        if self.order_by:
            options += f"&$orderby={quote(self.order_by, safe='')}"
        if self.top is not None:
            options += f"&$top={self.top}"
        return options


def build_query_plan(
    config: CompositeConfig,
    fields: list[str],
    entity_id: str,
    entity_name: str,
) -> QueryPlan:
    """
    Plan retrieval of the configured fields.

    Raises:
        MissingJoinFieldError: If source differs from target and no
            ``sourcefield`` is configured
    """
    target = entity_name.lower()
    source = config.source_entity(target)

    if source == target:
        return QueryPlan(target=target, source=source, fields=tuple(fields))

    if not config.sourcefield:
        raise MissingJoinFieldError(source=source, target=target)

    return QueryPlan(
        target=target,
        source=source,
        fields=tuple(fields),
        filter=f"{config.sourcefield} eq {to_odata_literal(entity_id)}",
        order_by=config.order_by or None,
        top=config.top,
    )
