"""A small WSGI web framework with chained routing, resources, Jinja2 templates and middleware."""

__version__ = "0.1.0"

__all__ = ["app", "colors", "jsonresp", "middleware", "templates", "testing", "view"]