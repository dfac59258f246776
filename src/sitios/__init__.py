"""Sitios: multi-tenant static site generation from external content sources."""

__version__ = "0.3.0"
__all__ = ["__version__"]
