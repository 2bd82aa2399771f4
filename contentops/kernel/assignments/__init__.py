"""
Assignment Graph Store - admin <-> founder edges.
"""

from contentops.kernel.assignments.assignment_store import AssignmentStore

__all__ = [
    "AssignmentStore",
]
