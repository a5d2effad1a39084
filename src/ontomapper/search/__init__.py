"""
Mapping search.

- branch_bound: MappingSearch, brute_force_mappings
- models:       Mapping, SearchResult, SearchStats
"""

from .branch_bound import MappingSearch, brute_force_mappings
from .models import Mapping, SearchResult, SearchStats

__all__ = [
    "MappingSearch",
    "brute_force_mappings",
    "Mapping",
    "SearchResult",
    "SearchStats",
]
