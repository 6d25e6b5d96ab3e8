class StashError(Exception):
    """Base class for errors raised by stores and the client transport."""


class Unauthorized(StashError):
    """The bearer token is missing, invalid or expired."""


class NotFound(StashError):
    """The bookmark targeted by an update or delete does not exist."""


class ValidationFailure(StashError):
    """Neither a url nor notes were supplied."""


class TransientFetchFailure(StashError):
    """Network or store failure that carries no authorization signal."""
