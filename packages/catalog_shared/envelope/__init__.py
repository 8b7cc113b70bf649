"""Public result and metadata API for catalog components."""

from .builders import failure, success
from .meta import EnvelopeMeta, new_meta
from .result import Result

__all__ = [
    "EnvelopeMeta",
    "Result",
    "failure",
    "new_meta",
    "success",
]
