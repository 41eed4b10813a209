"""Relationship loading: planning, batch resolution and counting."""

from __future__ import annotations

from row_orm.loading.builder import LoadPlanBuilder, plan
from row_orm.loading.counts import CountAggregator, load_counts, plan_counts
from row_orm.loading.eager import EagerLoader, load_relations
from row_orm.loading.plan import LoadPlan, LoadPlanNode
from row_orm.loading.resolver import BatchResolver

__all__ = [
    "LoadPlan",
    "LoadPlanNode",
    "LoadPlanBuilder",
    "plan",
    "BatchResolver",
    "EagerLoader",
    "load_relations",
    "CountAggregator",
    "plan_counts",
    "load_counts",
]
