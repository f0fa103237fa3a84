"""Pure analysis package for sprintlog.

This package contains deterministic, testable computations that operate on
in-memory inputs and return DTOs. It must not import Django or perform any
database I/O.
"""

from .engine import compute_track_statistics
from .stability import classify_stability

__all__ = ["classify_stability", "compute_track_statistics"]
