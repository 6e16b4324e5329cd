"""
Exception hierarchy for layout generation.

Only conditions that make a build impossible or would corrupt the layout
graph are raised. Expected search failures (overlaps, short branches, failed
loops) are reported on the build result instead.
"""


class LayoutGenerationError(Exception):
    pass


class CatalogConfigurationError(LayoutGenerationError):
    """Invalid catalog or settings; raised before any room is placed."""
    pass


class LayoutInvariantError(LayoutGenerationError):
    """A graph mutation would reuse a socket or join mismatched sockets."""
    pass


class GenerationCancelledException(LayoutGenerationError):
    pass
