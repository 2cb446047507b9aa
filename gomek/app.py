"""The application: route registration, the request multiplexer and the server."""

from __future__ import annotations

import abc
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

from werkzeug.serving import BaseWSGIServer, make_server
from werkzeug.wrappers import Request, Response

from .colors import BLUE, print_with_color
from .middleware import Handler
from .templates import RegisteredTemplates, log_templates
from .view import URI_ARGS_KEY, CurrentView, View

logger = logging.getLogger(__name__)

DEFAULT_BASE_TEMPLATE = "layout"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5000
DEFAULT_PROTOCOL = "http"
DEFAULT_METHODS = ("GET",)

Middleware = Callable[[Handler], Handler]


@dataclass
class Config:
    """Application settings passed to :class:`App`."""

    base_template_name: str = ""
    base_templates: list[str] = field(default_factory=list)
    debug: bool = False


class Resource(abc.ABC):
    """A REST resource whose methods handle DELETE, GET, POST and PUT requests."""

    @abc.abstractmethod
    def delete(self, response: Response, request: Request, data: dict) -> None:
        """Handle a DELETE request."""

    @abc.abstractmethod
    def get(self, response: Response, request: Request, data: dict) -> None:
        """Handle a GET request."""

    @abc.abstractmethod
    def post(self, response: Response, request: Request, data: dict) -> None:
        """Handle a POST request."""

    @abc.abstractmethod
    def put(self, response: Response, request: Request, data: dict) -> None:
        """Handle a PUT request."""


class ServeMux:
    """Dispatches requests to handlers by path pattern.

    A pattern matches its exact path; a pattern ending in ``/`` also matches
    every path below it, the longest such pattern winning. A request for
    ``/name`` is redirected to ``/name/`` when only the latter is registered.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def handle_func(self, pattern: str, handler: Handler) -> None:
        """Register ``handler`` for ``pattern``."""
        if not pattern:
            raise ValueError("http: invalid pattern")
        if handler is None:
            raise ValueError("http: nil handler")
        if pattern in self._handlers:
            raise ValueError(f"http: multiple registrations for {pattern}")
        self._handlers[pattern] = handler

    def _match(self, path: str) -> Optional[Handler]:
        exact = self._handlers.get(path)
        if exact is not None:
            return exact
        subtrees = [p for p in self._handlers if p.endswith("/") and path.startswith(p)]
        if not subtrees:
            return None
        return self._handlers[max(subtrees, key=len)]

    def dispatch(self, request: Request, response: Response) -> None:
        """Run the handler matching ``request`` against ``response``."""
        path = request.path
        if path not in self._handlers and path + "/" in self._handlers:
            location = path + "/"
            query = request.query_string.decode("latin-1")
            if query:
                location = f"{location}?{query}"
            response.status_code = 301
            response.headers["Location"] = location
            return
        handler = self._match(path)
        if handler is None:
            response.status_code = 404
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.content_type = "text/plain; charset=utf-8"
            response.set_data(b"404 page not found\n")
            return
        handler(response, request)

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        request = Request(environ)
        response = Response()
        self.dispatch(request, response)
        return response(environ, start_response)


class App:
    """A web application built by chaining route, method, view and template calls."""

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config if config is not None else Config()
        self.mux = ServeMux()
        self.host = ""
        self.port = 0
        self.protocol = ""
        self.view_store = View()
        self.middleware: list[Middleware] = []
        self.registered_templates: list[RegisteredTemplates] = []
        self.server: Optional[BaseWSGIServer] = None
        self.current_route = ""
        self.current_methods: Optional[list[str]] = None
        self.current_templates: Optional[list[str]] = None
        self.current_view: Optional[CurrentView] = None
        self.current_resource: Optional[Resource] = None

    def _reset_current_view(self) -> None:
        self.current_route = ""
        self.current_methods = None
        self.current_view = None
        self.current_templates = None

    def _store_current(self) -> None:
        if self.current_resource is not None:
            self.view_store.store_resource(self)
        else:
            self.view_store.store(self)

    def _clone_route(self) -> None:
        # Register a resource with a path variable under /<root> as well.
        if not self.current_route.endswith(">"):
            return
        if "POST" not in (self.current_methods or []):
            return
        for stored in list(self.view_store.stored_views):
            if stored.registered_route == self.current_route:
                self.current_route = f"/{stored.root_name}"
                self.view_store.store_resource(self)

    def set_host(self, host: str) -> None:
        """Set the host to serve on; defaults to ``localhost``."""
        self.host = host

    def listen(self, port: int) -> None:
        """Set the port to serve on; defaults to 5000."""
        self.port = port

    def methods(self, *methods: str) -> "App":
        """Set the current route's methods (``GET`` if none); ``OPTIONS`` is always added."""
        chosen = list(methods) or ["GET"]
        chosen.append("OPTIONS")
        self.current_methods = chosen
        return self

    def route(self, route: str) -> "App":
        """Start a new route, storing the previous one."""
        if self.current_route != "":
            self._store_current()
        self.current_route = route
        return self

    def templates(self, *templates: str) -> None:
        """Set the current route's templates."""
        self.current_templates = list(templates)

    def base_templates(self, *templates: str) -> None:
        """Set the base templates shared by every route."""
        self.config.base_templates = list(templates)

    def view(self, view: CurrentView) -> "App":
        """Set the function handling the current route."""
        self.current_view = view
        return self

    def resource(self, resource: Resource) -> "App":
        """Set a resource whose methods handle the current route."""
        self.current_resource = resource
        return self

    def use(self, middleware: Middleware) -> None:
        """Add a middleware wrapping every route handler."""
        self.middleware.append(middleware)

    def setup(self) -> str:
        """Register every stored view on the mux and return the server address."""
        if self.current_resource is not None:
            self.view_store.store_resource(self)
            if self.current_view is not None:
                self._clone_route()
        else:
            self.view_store.store(self)
        if not self.current_methods:
            self.current_methods = list(DEFAULT_METHODS)
        self._reset_current_view()

        if not self.config.base_template_name:
            self.config.base_template_name = DEFAULT_BASE_TEMPLATE
        if not self.host:
            self.host = DEFAULT_HOST
        if self.port == 0:
            self.port = DEFAULT_PORT
        if not self.protocol:
            self.protocol = DEFAULT_PROTOCOL

        for stored in self.view_store.stored_views:
            self.view_store.create(self, stored)

        if self.config.debug:
            log_templates(self.registered_templates)
        return f"{self.host}:{self.port}"

    def start(self) -> None:
        """Set up the routes and serve until shut down."""
        address = self.setup()
        logger.info(
            print_with_color(f"[GOMEK] Starting server on {self.protocol}://{address}", BLUE)
        )
        try:
            self.server = make_server(self.host, self.port, self)
        except OSError as exc:
            logger.error("[GOMEK] Error starting gomek server %s", exc)
            raise
        self.server.serve_forever()

    def shutdown(self) -> None:
        """Stop a running server."""
        if self.server is None:
            raise RuntimeError("error shutting down: server is not running")
        self.server.shutdown()
        self.server.server_close()

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        return self.mux(environ, start_response)


class TestApp(App):
    """An application whose ``start`` registers routes without serving."""

    __test__ = False

    def start(self) -> None:
        """Register the routes only."""
        self.setup()


def args(request: Request) -> Optional[dict[str, str]]:
    """Return the path variables matched for ``request``, or None."""
    return request.environ.get(URI_ARGS_KEY)


def get_params(request: Request, name: str) -> list[str]:
    """Return every value of query parameter ``name``; raise KeyError if absent."""
    values = request.args.getlist(name)
    if not values:
        logger.info("no %s in params", name)
        raise KeyError(f"param {name} not present")
    return values


def new(config: Optional[Config] = None) -> App:
    """Create a new application."""
    return App(config)


def new_test_app(config: Optional[Config] = None) -> TestApp:
    """Create a new application for tests."""
    return TestApp(config)


__all__: list[Any] = [
    "App",
    "Config",
    "Resource",
    "ServeMux",
    "TestApp",
    "args",
    "get_params",
    "new",
    "new_test_app",
]