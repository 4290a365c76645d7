"""
Error taxonomy for feed mutations.
"""


class FeedError(Exception):
    """Base exception for feed state errors."""
    pass


class ValidationError(FeedError):
    """A required field is empty or whitespace-only. Raised before any mutation."""
    pass


class AuthorizationError(FeedError):
    """No signed-in identity, or the identity may not touch the target entity."""
    pass


class RemoteFailure(FeedError):
    """The persistence service failed to confirm an optimistic mutation or a load."""
    pass


class NotFoundRace(FeedError):
    """The target entity was already removed by a concurrent mutation."""
    pass
