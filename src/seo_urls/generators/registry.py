"""Registry dispatching route names to their generators."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from seo_urls.errors import GeneratorNotFoundError
from seo_urls.generators.base import SeoUrlGenerator


class GeneratorRegistry:
    """Route name -> generator lookup table.

    Usage:
        registry = GeneratorRegistry([product_generator, category_generator])
        generator = registry.get("frontend.detail.page")
    """

    def __init__(self, generators: Iterable[SeoUrlGenerator] = ()) -> None:
        self._generators: dict[str, SeoUrlGenerator] = {}
        for generator in generators:
            self.register(generator)

    def register(self, generator: SeoUrlGenerator) -> None:
        """Register a generator for its route name.

        Raises:
            ValueError: If another generator already handles the route.
        """
        if generator.route_name in self._generators:
            raise ValueError(f"A generator for route {generator.route_name!r} is already registered")
        self._generators[generator.route_name] = generator

    def get(self, route_name: str) -> SeoUrlGenerator:
        """Return the generator for ``route_name``.

        Raises:
            GeneratorNotFoundError: If no generator handles the route.
        """
        try:
            return self._generators[route_name]
        except KeyError:
            raise GeneratorNotFoundError(route_name) from None

    def route_names(self) -> list[str]:
        return sorted(self._generators)

    def __contains__(self, route_name: object) -> bool:
        return route_name in self._generators

    def __iter__(self) -> Iterator[SeoUrlGenerator]:
        return iter(self._generators.values())

    def __len__(self) -> int:
        return len(self._generators)
