"""
Composition pipeline: configuration resolution, planning and rendering.
"""

from detail_composite.composition.builder import build_composite, build_from_template
from detail_composite.composition.literals import is_guid, to_odata_literal
from detail_composite.composition.planner import QueryPlan, build_query_plan
from detail_composite.composition.resolver import ConfigResolver
from detail_composite.composition.rows import collect_field_names, normalize_rows
from detail_composite.composition.truncation import truncate
from detail_composite.composition.values import get_field_value, safe_stringify

__all__ = [
    "ConfigResolver",
    "QueryPlan",
    "build_composite",
    "build_from_template",
    "build_query_plan",
    "collect_field_names",
    "get_field_value",
    "is_guid",
    "normalize_rows",
    "safe_stringify",
    "to_odata_literal",
    "truncate",
]
