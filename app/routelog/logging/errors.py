"""Custom exceptions for the routed logging system.

Provides the exceptions raised while building routing tables and engines.
Dispatch itself never raises these: formatting and write failures
propagate as the original exception.
"""


class RouteLogError(Exception):
    """Base exception for all routelog errors.

    Example:
        try:
            hook = new_route_hook(output)
        except RouteLogError as e:
            sys.exit(f"bad logging setup: {e}")
    """

    pass


class ConfigurationError(RouteLogError, TypeError):
    """Raised when a routing table is built from an unsupported output.

    Example:
        >>> new_route_hook(42)
        Traceback (most recent call last):
        ...
        ConfigurationError: unsupported level map type: int
    """

    pass
