"""Business errors raised by the marketplace core.

Malformed input is reported with Protean's ``ValidationError``; everything
here is a rule violation the caller can act on. Each error carries a
human-readable message plus keyword context that is echoed in the JSON body.
"""


class MarketplaceError(Exception):
    status_code = 500

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message, **self.context}


class AuthenticationError(MarketplaceError):
    """Missing, malformed or expired bearer token."""

    status_code = 401


class NotFoundError(MarketplaceError):
    status_code = 404


class ForbiddenError(MarketplaceError):
    """The caller does not own the resource or lacks the required role."""

    status_code = 403


class ConflictError(MarketplaceError):
    status_code = 409


class InsufficientStockError(ConflictError):
    """A variant does not have enough units on hand."""


class EmptyCartError(ConflictError):
    pass


class ConcurrentUpdateError(ConflictError):
    """A concurrent writer won the race; the operation can be retried."""


class InternalError(MarketplaceError):
    status_code = 500
