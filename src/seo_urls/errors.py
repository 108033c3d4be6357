"""Exceptions raised by the SEO URL engine.

Obsoletion and duplicate invalidation are routine outcomes of a generation
pass and never raise.
"""

from __future__ import annotations

from typing import Any


class SeoUrlError(Exception):
    """Base class for all SEO URL engine errors."""


class GeneratorNotFoundError(SeoUrlError):
    """No generator is registered for the requested route (configuration error)."""

    def __init__(self, route_name: str) -> None:
        self.route_name = route_name
        super().__init__(f"SeoUrlGenerator with {route_name} not found.")


class InvalidTemplateError(SeoUrlError):
    """The template string does not parse."""


class TemplateRenderError(SeoUrlError):
    """A template could not be rendered for one entity.

    Raised in strict mode when the template references a variable the
    entity context does not provide, or when the rendered path is empty.
    """

    def __init__(self, message: str, foreign_key: Any = None) -> None:
        self.foreign_key = foreign_key
        self.message = message
        prefix = f"[{foreign_key}] " if foreign_key is not None else ""
        super().__init__(f"{prefix}{message}")


class SeoUrlStorageError(SeoUrlError):
    """Writing a generation batch failed. The batch should be retried in full."""
