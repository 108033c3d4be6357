"""Template validation and rendering for SEO paths.

Templates are Jinja2 strings such as ``{{ product.name }}/{{ product.number }}``.
The environment is configured so that:
- Referencing an undefined variable raises (StrictUndefined) instead of
  rendering an empty segment.
- Every ``{{ expression }}`` output is slugified, so rendered paths are
  always valid path segments. Literal template text (e.g. ``/``) is kept.
  An expression that slugifies to nothing (``None``, ``"!!!"``) is an error.
- Nothing is cached. Administrators rewrite templates often and the latest
  template must always be used.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from jinja2 import Environment, StrictUndefined, Template, TemplateError, TemplateSyntaxError

from seo_urls.errors import InvalidTemplateError, TemplateRenderError
from seo_urls.utils.slugify import normalize_path, slugify

logger = logging.getLogger(__name__)


def _slug_segment(value: Any) -> str:
    """Slugify one ``{{ expression }}`` output; an empty segment is an error."""
    segment = slugify(value)
    if not segment:
        raise TemplateRenderError(f"Expression rendered an empty path segment: {value!r}")
    return segment


class SeoUrlTemplateRenderer:
    """Compile and render SEO URL templates with strict variable semantics.

    Usage:
        renderer = SeoUrlTemplateRenderer()
        renderer.validate("{{ product.name }}")
        path = renderer.render("{{ product.name }}", {"product": {"name": "Red Shoe"}})
        # "red-shoe"
    """

    def __init__(self) -> None:
        self._env = Environment(
            undefined=StrictUndefined,
            autoescape=False,
            cache_size=0,
            auto_reload=True,
            finalize=_slug_segment,
        )
        self._env.filters["slugify"] = slugify

    @property
    def environment(self) -> Environment:
        return self._env

    def validate(self, template: str) -> Template:
        """Compile a template string.

        Args:
            template: The template source.

        Returns:
            The compiled template.

        Raises:
            InvalidTemplateError: If the template does not parse.
        """
        try:
            return self._env.from_string(template)
        except TemplateSyntaxError as exc:
            raise InvalidTemplateError(f"Syntax error: {exc.message or exc}") from exc

    def render(
        self,
        template: str | Template,
        context: Mapping[str, Any],
        *,
        foreign_key: Any = None,
    ) -> str:
        """Render a template for one entity into a normalized SEO path.

        Raises:
            InvalidTemplateError: If ``template`` is a string that does not parse.
            TemplateRenderError: If a variable is undefined, an expression fails
                for this context, or a segment or the whole path is empty.
        """
        compiled = self.validate(template) if isinstance(template, str) else template

        try:
            rendered = compiled.render(dict(context))
        except TemplateRenderError as exc:
            raise TemplateRenderError(exc.message, foreign_key=foreign_key) from exc
        except (TemplateError, TypeError, ValueError, ArithmeticError, LookupError) as exc:
            raise TemplateRenderError(str(exc), foreign_key=foreign_key) from exc

        path = normalize_path(rendered)
        if not path:
            raise TemplateRenderError("Template rendered an empty path", foreign_key=foreign_key)

        return path

    def render_all(
        self,
        template: str | Template,
        contexts: Mapping[Any, Mapping[str, Any]],
    ) -> dict[Any, str]:
        """Render a template for every entity context.

        The first failing entity aborts the whole batch so nothing is written
        for a partially rendered route.

        Args:
            template: Template source or compiled template.
            contexts: Rendering context per foreign key.

        Returns:
            Rendered SEO path per foreign key.
        """
        compiled = self.validate(template) if isinstance(template, str) else template

        paths = {
            foreign_key: self.render(compiled, context, foreign_key=foreign_key)
            for foreign_key, context in contexts.items()
        }
        logger.debug("Rendered %d SEO paths", len(paths))
        return paths
