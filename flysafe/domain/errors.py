"""
Domain error taxonomy.
"""


class InvalidInputError(ValueError):
    """Raised when a numeric input is non-finite or outside its valid range."""
    pass


class UnsupportedGeometryError(Exception):
    """Raised for zone geometries that cannot be tested for containment."""

    def __init__(self, geometry_type, reason=None):
        self.geometry_type = geometry_type
        self.reason = reason
        if reason:
            message = f"Malformed {geometry_type} zone geometry: {reason}"
        else:
            message = f"Unsupported zone geometry type: {geometry_type!r}"
        super().__init__(message)


class EvaluationTimeoutError(Exception):
    """Raised when a safety evaluation does not complete within its time bound."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Safety evaluation exceeded {timeout:.1f}s")
