"""Adapters — operations and the tool bindings they drive.

Public re-exports for convenient access.
"""

from restbase.adapters.base import Operation, OperationState
from restbase.adapters.mock import CallJournal, MockOperation

__all__ = [
    "CallJournal",
    "MockOperation",
    "Operation",
    "OperationState",
]
