"""Helpers for testing views."""

from __future__ import annotations

from .app import App
from .middleware import Handler
from .view import CurrentView


def create_test_handler(test_app: App, view: CurrentView) -> Handler:
    """Return a handler running ``view`` for requests matching the app's routes."""
    store = test_app.view_store
    return store.handle_func_wrapper([], test_app.config, store, view)