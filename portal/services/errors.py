# Hippies Portal - Service Errors


class NotFoundError(LookupError):
    """Raised when a requested record does not exist (or is hidden)."""
    pass
