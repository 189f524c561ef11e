"""Warble exception hierarchy.

Shared across the bundler, registry, route tree, and renderer so every
module raises and catches the same types.  None of these are recovered
inside warble: they surface to the host build as authoring errors.
"""

from typing import Any


class WarbleError(Exception):
    """Base for all warble-specific errors."""


class ConfigurationError(WarbleError):
    """Raised when plugin configuration is invalid.

    Typically raised from ``PluginConfig.__post_init__`` or when a hook
    is called before ``init()`` configured the input directories.
    """


class CompileError(WarbleError):
    """The component compiler failed.  Fatal to the current build pass."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class LoadError(WarbleError):
    """A component has no output mapping, or its module failed to load."""

    def __init__(self, message: str, *, logical_path: str | None = None) -> None:
        super().__init__(message)
        self.logical_path = logical_path


class RouteError(WarbleError):
    """Base for permalink route-object failures.

    Carries the offending route object so the host can report which
    page asked for it.
    """

    def __init__(self, message: str, *, route_object: Any = None) -> None:
        if route_object is not None:
            message = f"{message} (route object: {route_object!r})"
        super().__init__(message)
        self.route_object = route_object


class UnnamedRouteError(RouteError):
    """A permalink route object targets a route without a ``name``."""


class UnreachableRouteError(RouteError):
    """A permalink route object points outside the route tree."""


class RouteParamError(RouteError):
    """A route could not be built from the given params."""


class NotFound(WarbleError):  # noqa: N818
    """No route matched a path."""
