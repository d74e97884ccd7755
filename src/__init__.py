"""folio — file-backed content store for a small blog/CMS."""

__version__ = "0.3.0"
