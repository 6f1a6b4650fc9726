"""Exception types shared across the pipeline.

ConfigurationError and OutputError abort a run. The rest are route-local:
the extractor skips the route, reports the message and carries on.
"""


class RoutedocError(Exception):
    """Base class for all routedoc errors."""


class ConfigurationError(RoutedocError):
    """Malformed configuration or conflicting strategy setup."""


class OutputError(RoutedocError):
    """Output could not be validated or written."""


class RouteError(RoutedocError):
    """A problem confined to a single route."""


class UnresolvableHandler(RouteError):
    pass


class TagSyntaxError(RouteError):
    """A docblock tag could not be parsed."""


class StrategyFailure(RouteError):
    """Raised by a strategy that cannot document the route at all."""


class InvocationError(RouteError):
    """The handler could not be called in-process."""
