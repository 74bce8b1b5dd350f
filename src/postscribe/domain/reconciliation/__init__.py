"""Reconciliation core: decide and apply annotation changes for content items.

Layered flow:
1) key items by canonical path (``postscribe.domain.identity``)
2) plan per item from timestamps (``policy``)
3) summarize and write through the ports (``engine``)
4) sweep orphaned annotations (``policy.find_orphans`` + ``engine``)
"""

from __future__ import annotations

from .contracts import (
    DEFAULT_UPDATE_THRESHOLD,
    Decision,
    DecisionKind,
    ReconcileMode,
    ReconcileSettings,
    ReconciliationSummary,
    SkipReason,
)
from .engine import ReconciliationContext, ReconciliationEngine, reconcile, render_body
from .policy import find_orphans, index_by_path, plan_item

__all__ = [
    "DEFAULT_UPDATE_THRESHOLD",
    "Decision",
    "DecisionKind",
    "ReconcileMode",
    "ReconcileSettings",
    "ReconciliationContext",
    "ReconciliationEngine",
    "ReconciliationSummary",
    "SkipReason",
    "find_orphans",
    "index_by_path",
    "plan_item",
    "reconcile",
    "render_body",
]
