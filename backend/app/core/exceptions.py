class NotFoundError(ValueError):
    """No stored record exists for the requested identifier."""


class ValidationError(ValueError):
    """A property setter received a value of the wrong shape."""
