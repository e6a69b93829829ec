"""Reconciliation engine and interactive workflows."""

from .controller import NEXT_ITEM, PhaseController, Transition, resolve_transition
from .merge import MergeOrchestrator
from .open_prs import OpenPRsFlow
from .prune import PruneFlow
from .reconciler import BranchReconciler, combine_orphan_signals

__all__ = [
    "BranchReconciler",
    "MergeOrchestrator",
    "NEXT_ITEM",
    "OpenPRsFlow",
    "PhaseController",
    "PruneFlow",
    "Transition",
    "combine_orphan_signals",
    "resolve_transition",
]
