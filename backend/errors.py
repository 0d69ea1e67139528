class ApiError(Exception):
    """Base error; ``status`` is the HTTP code the error handler answers with."""
    status = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    status = 400


class AuthError(ApiError):
    status = 403

    def __init__(self, message="Unauthorized"):
        super().__init__(message)


class NotFoundError(ApiError):
    status = 404


class StoreError(ApiError):
    """Failure reported by the record store, message passed through verbatim."""


class ConflictError(StoreError):
    """A constraint rejected an insert."""


class UploadError(ApiError):
    """Failure reported by the media host."""
