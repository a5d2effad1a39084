"""Contingency-table construction from count queries."""

from .table import ContingencyTableOracle, instance_predicates

__all__ = ["ContingencyTableOracle", "instance_predicates"]
