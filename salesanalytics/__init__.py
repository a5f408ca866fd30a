"""Sales CSV import into a database and top-product reporting over HTTP."""

__version__ = "0.1.0"
__all__ = ["__version__"]