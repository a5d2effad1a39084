"""
Count backends: the contract and two adapters.

- backend: CountBackend protocol
- memory:  InMemoryCountIndex, read_annotations
- retry:   RetryingCountBackend
"""

from .backend import CountBackend
from .memory import InMemoryCountIndex, read_annotations
from .retry import RetryingCountBackend

__all__ = [
    "CountBackend",
    "InMemoryCountIndex",
    "read_annotations",
    "RetryingCountBackend",
]
