"""diskinsight - find reclaimable and archivable disk space."""

__version__ = "0.1.0"
