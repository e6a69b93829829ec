"""
git-housekeeper - Interactive repository maintenance for git
"""

from .__version__ import __version__
from .core import BranchReconciler, MergeOrchestrator, PruneFlow

__all__ = ["BranchReconciler", "MergeOrchestrator", "PruneFlow", "__version__"]
