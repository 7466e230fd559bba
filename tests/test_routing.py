# tests/test_routing.py
"""Checks on how the API routes are wired."""

import inspect

from fastapi.routing import APIRoute

from agora.main import app


def _api_routes() -> list[APIRoute]:
    return [
        route
        for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith("/api/v1")
    ]


def test_api_routes_are_registered() -> None:
    paths = {route.path for route in _api_routes()}

    assert {
        "/api/v1/auth/login",
        "/api/v1/posts/",
        "/api/v1/categories/",
        "/api/v1/reactions/",
    } <= paths


def test_database_handlers_run_in_the_threadpool() -> None:
    """Handlers doing blocking store work must be plain functions, not coroutines."""
    coroutines = [route.path for route in _api_routes() if inspect.iscoroutinefunction(route.endpoint)]

    assert coroutines == []
