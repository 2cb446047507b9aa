"""Request middleware: logging, CORS and authorisation.

A handler is a callable ``handler(response, request)`` that fills in a
werkzeug ``Response``; a middleware takes a handler and returns a new one.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from typing import Optional

from werkzeug.wrappers import Request, Response

from .colors import BLUE, RED, print_with_color

Handler = Callable[[Response, Request], None]
AuthCallback = Callable[[Request], "tuple[bool, Optional[Request]]"]


def _request_uri(request: Request) -> str:
    query = request.query_string.decode("latin-1")
    return f"{request.path}?{query}" if query else request.path


def logging_middleware(next_handler: Handler) -> Handler:
    """Print the method, URI, duration and status of every request."""

    def handler(response: Response, request: Request) -> None:
        start = time.perf_counter()
        next_handler(response, request)
        duration = time.perf_counter() - start
        status = response.status_code
        msg = (
            f"[INFO] {request.method} {_request_uri(request)} "
            f"{duration:.6f}s Status: {status}\n"
        )
        print(print_with_color(msg, BLUE if status < 400 else RED), end="")

    return handler


def _set_cors_headers(response: Response) -> None:
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "*"


def cors(next_handler: Handler) -> Handler:
    """Permissive development CORS; answers OPTIONS requests with 200."""

    def handler(response: Response, request: Request) -> None:
        _set_cors_headers(response)
        if request.method == "OPTIONS":
            response.status_code = 200
            return
        next_handler(response, request)

    return handler


def allow_route(routes: Iterable[Sequence[str]], current_route: str, req_method: str) -> bool:
    """Return True if the route and method are in the whitelist.

    Each entry is a (path, method) pair; a path holding a single ``*``
    matches every route starting with the part before the ``*``.
    """
    path, sep, _ = current_route.partition("?")
    if sep:
        current_route = path if path == "/" else path + "/"

    for entry in routes:
        route, method = entry[0], entry[1]
        if method != req_method:
            continue
        parts = route.split("*")
        if len(parts) == 2:
            prefix = parts[0]
            if prefix and current_route.startswith(prefix):
                return True
        elif route == current_route:
            return True
    return False


def authorize(
    white_list: Iterable[Sequence[str]], callback: AuthCallback
) -> Callable[[Handler], Handler]:
    """Build a middleware that requires ``callback`` to approve non-whitelisted routes.

    ``callback(request)`` returns ``(ok, new_request)``. When ``ok`` is false
    the response is 401. When ``new_request`` is not None it is passed on
    in place of the original request.
    """
    routes = [tuple(entry) for entry in white_list]

    def middleware(next_handler: Handler) -> Handler:
        def handler(response: Response, request: Request) -> None:
            if not allow_route(routes, _request_uri(request), request.method):
                ok, new_request = callback(request)
                if not ok:
                    response.status_code = 401
                    return
                if new_request is not None:
                    next_handler(response, new_request)
                    return
            next_handler(response, request)

        return handler

    return middleware