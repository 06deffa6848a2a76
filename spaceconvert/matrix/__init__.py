"""Matrix transport layer."""

from spaceconvert.matrix.errors import MatrixNotFound, MatrixRequestError
from spaceconvert.matrix.transport import MatrixTransport, Result, best_effort

__all__ = [
    "MatrixNotFound",
    "MatrixRequestError",
    "MatrixTransport",
    "Result",
    "best_effort",
]
