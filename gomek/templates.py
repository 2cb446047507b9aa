"""Template lists and their debug listing."""

from __future__ import annotations

from dataclasses import dataclass, field

from .colors import BLUE, GREEN, print_with_color


@dataclass
class Template:
    """Holds the app's base templates."""

    base: list[str] = field(default_factory=list)
    route_templates: list[str] = field(default_factory=list)

    def run(self, *route_templates: str) -> list[str]:
        """Return the base templates followed by the given route templates."""
        return [*self.base, *route_templates]


@dataclass
class RegisteredTemplates:
    """A route together with its templates and partials, for logging."""

    route: str
    templates: list[str] = field(default_factory=list)
    partials: list[str] = field(default_factory=list)


def _format_list(items: list[str]) -> str:
    return "[" + " ".join(items) + "]"


def log_templates(registered_templates: list[RegisteredTemplates]) -> None:
    """Print every registered route with its templates and partials."""
    if not registered_templates:
        return
    print(print_with_color("[Registering Templates]:", BLUE))
    for registered in registered_templates:
        lines = [
            f"\t- Route: {registered.route}\n",
            f"\t- Route Templates: {_format_list(registered.templates)}\n",
            "\t- Partial Templates: \n",
            *(f"\t\t-  {partial}\n" for partial in registered.partials),
        ]
        for line in lines:
            print(print_with_color(line, GREEN), end="")
        print()