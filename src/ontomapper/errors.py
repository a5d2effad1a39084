"""
Error kinds raised by ontomapper.

Each error also derives from the builtin exception callers would expect for
the same situation, so ``except ValueError`` keeps working around parameter
and graph validation.
"""

__all__ = [
    "MappingError",
    "InvalidParameter",
    "OracleUnavailable",
    "MalformedGraph",
    "SearchFailed",
]


class MappingError(Exception):
    """Base class for all ontomapper errors."""


class InvalidParameter(MappingError, ValueError):
    """Non-positive smoothing, bad threshold ordering or malformed counts."""


class OracleUnavailable(MappingError, ConnectionError):
    """A count query against the backend failed."""


class MalformedGraph(MappingError, ValueError):
    """Cycle detected, or a concept outside the ontology's declared range."""


class SearchFailed(MappingError, RuntimeError):
    """
    A search aborted after it had started.

    The partial result is kept on the exception: mappings emitted before the
    failure stay valid, but the run is reported with ``status == "failed"``.
    """

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result
