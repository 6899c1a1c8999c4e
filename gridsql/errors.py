class GridQueryError(Exception):
    """Base class for errors raised while translating a grid request."""


class ConfigurationMissing(GridQueryError, RuntimeError):
    """The grid has no column catalog (or its configuration could not be loaded)."""


class InvalidInput(GridQueryError, ValueError):
    """A value supplied for the query failed strict validation."""


__all__ = ["GridQueryError", "ConfigurationMissing", "InvalidInput"]
