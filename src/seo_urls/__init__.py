"""SEO URL generation, canonicalization and path resolution."""

__version__ = "0.1.0"
