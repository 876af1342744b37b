"""Personal-machine housekeeping: sort downloads, drop temp files, prune stale node_modules."""

__version__ = "1.0.0"


class SaafsafaiError(Exception):
    """Base class for errors raised by saafsafai."""
