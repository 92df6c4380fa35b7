"""Graph module providing pure algorithms over element links.

This module contains:
- dependency_order: Layered topological ordering with deterministic ties
- transitive_closure: Everything reachable from a node along one relation
"""

from ._algorithms import dependency_order, transitive_closure

__all__ = ["dependency_order", "transitive_closure"]
