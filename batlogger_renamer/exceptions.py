"""
Custom exception hierarchy for the batlogger renamer.

Per-file and per-row operations never raise these to the batch loop; they
report an outcome tag instead. These exceptions mark failures that end a
whole run (configuration) or a single table.
"""


class BatloggerRenamerError(Exception):
    """Base exception for all batlogger renamer errors."""
    pass


class ConfigurationError(BatloggerRenamerError):
    """Raised when the run is misconfigured (bad folder count, missing root)."""
    pass


class MetadataExtractionError(BatloggerRenamerError):
    """Raised when a sidecar file cannot be parsed."""
    pass


class CatalogError(BatloggerRenamerError):
    """Raised when the naming catalog cannot be saved or loaded."""
    pass


class ResultsTableError(BatloggerRenamerError):
    """Raised when a results CSV stays unreadable after repair."""
    pass
