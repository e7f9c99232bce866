"""Exceptions raised by Route Geometry."""


class RouteGeometryError(Exception):
    """Base class for all package errors."""


class RoutingProviderError(RouteGeometryError):
    """The routing engine could not be reached or returned an unusable payload."""


class LoopNotFoundError(RouteGeometryError):
    """No loop candidate satisfied the target distance within the search budget."""

    def __init__(self, message: str = "Unable to generate a satisfactory loop."):
        super().__init__(message)


class PoiSourceError(RouteGeometryError):
    """Every Overpass server failed to answer a POI query."""
