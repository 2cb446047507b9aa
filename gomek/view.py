"""Route views: storing registered routes, matching requests and wrapping handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import jinja2
from werkzeug.wrappers import Request, Response

from .colors import RED, print_with_color
from .middleware import Handler
from .templates import RegisteredTemplates, Template

logger = logging.getLogger(__name__)

URI_ARGS_KEY = "gomek.uri_args"

CurrentView = Callable[[Response, Request, dict], None]


@dataclass
class ViewTemplate:
    """A route with the templates it renders."""

    route: str
    templates: list[str] = field(default_factory=list)


@dataclass
class View:
    """A registered route, or the collection of all stored routes."""

    registered_route: str = ""
    route_paths: list[str] = field(default_factory=list)
    root_name: str = ""
    route: str = ""
    methods: list[str] = field(default_factory=list)
    templates: list[str] = field(default_factory=list)
    view: Optional[CurrentView] = None
    stored_views: list["View"] = field(default_factory=list)

    def create(self, app: Any, view: "View") -> None:
        """Wrap ``view`` in the app's middleware and register it on the app's mux."""
        if view.route == "":
            logger.warning("[GOMEK] Warning: Route is set to an empty string!")

        template = Template(base=list(app.config.base_templates or []))
        final_templates: list[str] = []
        if view.templates:
            final_templates = template.run(*view.templates)
            app.registered_templates.append(
                RegisteredTemplates(
                    route=view.route,
                    templates=list(view.templates),
                    partials=template.base,
                )
            )

        wrapped: Optional[Handler] = self.handle_func_wrapper(
            final_templates, app.config, view, view.view
        )
        for middleware in app.middleware:
            if middleware is not None:
                wrapped = middleware(wrapped)

        if wrapped is None:
            wrapped = self.handle_func_wrapper(final_templates, app.config, view, view.view)
        app.mux.handle_func(view.route, wrapped)

    def store(self, app: Any) -> None:
        """Store the app's current route as a view and reset the app's current view."""
        stored = View(
            route=app.current_route,
            methods=list(app.current_methods or []),
            templates=list(app.current_templates or []),
            view=app.current_view,
        )
        if app.current_route != "/":
            segments = app.current_route.split("/")
            for segment in segments[1:]:
                if segment.startswith("<") and segment.endswith(">"):
                    stored.registered_route = app.current_route
                    stored.route = f"/{segments[1]}/"
                    stored.route_paths = segments[1:]
                    stored.root_name = segments[1]
                    break

        self.stored_views.append(stored)
        app._reset_current_view()

    def store_resource(self, app: Any) -> None:
        """Store the app's current resource as a view dispatching on the request method."""
        resource = app.current_resource
        if resource is None:
            return
        methods = list(app.current_methods or [])
        app.current_view = create_handler_from_resource(
            resource.delete, resource.get, resource.post, resource.put
        )
        app.current_methods = methods
        self.store(app)

    def handle_func_wrapper(
        self,
        templates: list[str],
        config: Any,
        view: "View",
        current_view: Optional[CurrentView],
    ) -> Handler:
        """Build a handler that matches the route and method, then runs ``current_view``.

        When templates are given, the template named by the config's base
        template name is rendered with the data the view filled in.
        """
        templates = list(templates or [])

        def handler(response: Response, request: Request) -> None:
            matched, variables, ok = get_view(request, view)
            if not ok or matched is None or not method_allowed(request, matched):
                return
            request = set_view_vars(request, variables)
            data: dict = {}
            current_view(response, request, data)
            if templates:
                _render_into(response, templates, config.base_template_name, data)

        return handler


def _load_templates(templates: list[str]) -> jinja2.Environment:
    sources: dict[str, str] = {}
    for name in templates:
        path = Path(name)
        text = path.read_text(encoding="utf-8")
        sources[path.name] = text
        sources.setdefault(path.stem, text)
    env = jinja2.Environment(loader=jinja2.DictLoader(sources), autoescape=True)
    for name in sources:
        env.get_template(name)
    return env


def _render_into(response: Response, templates: list[str], base_name: str, data: dict) -> None:
    try:
        env = _load_templates(templates)
    except (OSError, jinja2.TemplateError) as exc:
        logger.error(
            print_with_color(f"[GOMEK]: Error parsing registeredTemplates: {exc}", RED)
        )
        raise
    try:
        body = env.get_template(base_name).render(data)
    except jinja2.TemplateError as exc:
        logger.error("[GOMEK] Error: Error executing template!\n %s", exc)
        return
    response.content_type = "text/html; charset=utf-8"
    response.set_data(body.encode("utf-8"))


def new_test_view(views: list[View]) -> View:
    """Return a ``/blogs`` POST view holding ``views`` as its stored views."""
    return View(route="/blogs", methods=["POST"], stored_views=views)


def strip_tokens(path_segment: str) -> str:
    """Return the name inside a ``<name>`` path segment."""
    try:
        return path_segment.split("<")[1].split(">")[0]
    except IndexError:
        raise ValueError(f"path segment {path_segment!r} holds no <variable>") from None


def parse_view(
    request: Request, view: View
) -> tuple[Optional[View], Optional[dict[str, str]], bool]:
    """Match the request path against ``view``.

    Returns the view, the path variables (or None) and whether it matched.
    """
    path = request.path
    if path == view.route:
        return view, None, True
    url_paths = path.split("/")[1:]
    if (
        url_paths
        and view.root_name == url_paths[0]
        and len(url_paths) == 2
        and len(view.route_paths) > 1
    ):
        return view, {strip_tokens(view.route_paths[1]): url_paths[1]}, True
    return None, None, False


def get_view(
    request: Request, view: View
) -> tuple[Optional[View], Optional[dict[str, str]], bool]:
    """Match the request against ``view`` and its stored views.

    The result of the last view tried is the one returned.
    """
    result: tuple[Optional[View], Optional[dict[str, str]], bool] = (None, None, False)
    if view.view is not None:
        result = parse_view(request, view)
    for stored in view.stored_views:
        result = parse_view(request, stored)
    return result


def set_view_vars(request: Request, variables: Optional[dict[str, str]]) -> Request:
    """Attach the path variables to the request and return it."""
    request.environ[URI_ARGS_KEY] = variables
    return request


def method_allowed(request: Request, view: View) -> bool:
    """Return True if the request method is one of the view's methods."""
    return request.method in view.methods


def create_handler_from_resource(
    delete: CurrentView, get: CurrentView, post: CurrentView, put: CurrentView
) -> CurrentView:
    """Build a single view that calls the resource function for the request method."""
    dispatch = {"DELETE": delete, "GET": get, "POST": post, "PUT": put}

    def handler(response: Response, request: Request, data: dict) -> None:
        target = dispatch.get(request.method)
        if target is not None:
            target(response, request, data)

    return handler