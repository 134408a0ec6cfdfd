"""Line reconciliation and document aggregation."""

from .aggregator import aggregate
from .edit_tracker import EditSourceTracker
from .numeric import round2, to_decimal
from .reconciler import reconcile, reconcile_all
from .session import EditingSession

__all__ = [
    "aggregate",
    "EditSourceTracker",
    "round2",
    "to_decimal",
    "reconcile",
    "reconcile_all",
    "EditingSession",
]
