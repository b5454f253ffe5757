"""Product type registry.

Each product type (seat, capacity, open, equipment, package, timeslot)
is a plugin pairing a configuration validator with a review renderer.
The configuration step dispatches through this registry instead of
branching on product type.
"""

from dataclasses import dataclass
from typing import Callable


ConfigValidator = Callable[[dict], dict[str, str]]
ConfigRenderer = Callable[[dict], str]


@dataclass
class ProductTypePlugin:
    """Definition of a product type.

    Attributes:
        name: Unique identifier (matches ProductType values)
        label: Human-readable display name
        validator: Maps a product_config dict to a field -> error map
        renderer: Optional function producing a one-line review summary
        description: Short explanation for the type picker
        category: Grouping category for the type picker
    """

    name: str
    label: str
    validator: ConfigValidator
    renderer: ConfigRenderer | None = None
    description: str = ""
    category: str = "Activities & Experiences"


class ProductTypeRegistry:
    """Central registry of product type plugins."""

    _plugins: dict[str, ProductTypePlugin] = {}

    @classmethod
    def register(cls, plugin: ProductTypePlugin) -> None:
        """Register a product type plugin."""
        cls._plugins[plugin.name] = plugin

    @classmethod
    def unregister(cls, name: str) -> None:
        """Unregister a product type plugin by name."""
        cls._plugins.pop(name, None)

    @classmethod
    def get(cls, name: str) -> ProductTypePlugin | None:
        """Get a product type plugin by name."""
        return cls._plugins.get(name)

    @classmethod
    def all(cls) -> list[ProductTypePlugin]:
        """Get all registered plugins."""
        return list(cls._plugins.values())

    @classmethod
    def get_by_category(cls, category: str) -> list[ProductTypePlugin]:
        """Get all plugins in a category."""
        return [p for p in cls._plugins.values() if p.category == category]

    @classmethod
    def clear(cls) -> None:
        """Clear all registered plugins (for testing)."""
        cls._plugins.clear()

    @classmethod
    def validate_config(cls, product_type: str, config: dict) -> dict[str, str]:
        """Validate a product_config dict for the given product type.

        Returns:
            Field -> error message map (empty if valid)
        """
        plugin = cls.get(product_type)
        if plugin is None:
            return {"product_type": f"Unknown product type: {product_type or 'none'}"}
        return plugin.validator(config or {})

    @classmethod
    def render_summary(cls, product_type: str, config: dict) -> str:
        """Render the review summary line for a product configuration."""
        plugin = cls.get(product_type)
        if plugin is None:
            return ""
        if plugin.renderer is None:
            return plugin.label
        return plugin.renderer(config or {})


def product_type(
    name: str,
    label: str,
    renderer: ConfigRenderer | None = None,
    description: str = "",
    category: str = "Activities & Experiences",
):
    """Decorator to register a function as a product type validator.

    Example:
        @product_type(name="kayak", label="Kayak Rental")
        def validate_kayak(config):
            if not config.get("boats"):
                return {"boats": "At least one boat is required"}
            return {}
    """

    def decorator(func: ConfigValidator) -> ConfigValidator:
        ProductTypeRegistry.register(
            ProductTypePlugin(
                name=name,
                label=label,
                validator=func,
                renderer=renderer,
                description=description,
                category=category,
            )
        )
        return func

    return decorator
