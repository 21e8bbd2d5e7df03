"""Wiki OpenGraph - og:* metadata for wiki pages."""

__version__ = "0.1.0"
