class LibraryError(ValueError):
    """Base for circulation errors. Controllers render these as JSON with `status_code`."""
    status_code = 400


class NotFound(LibraryError):
    status_code = 404


class OutOfStock(LibraryError):
    pass


class QuotaExceeded(LibraryError):
    pass


class AlreadyBorrowed(LibraryError):
    pass


class DuplicatePending(LibraryError):
    status_code = 409


class AlreadyHandled(LibraryError):
    status_code = 409


class ValidationError(LibraryError):
    pass
