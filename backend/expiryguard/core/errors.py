# backend/expiryguard/core/errors.py


class ExpiryGuardError(Exception):
    """Base for every error the service raises on purpose."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(ExpiryGuardError):
    # bad product fields, discount % outside [1, 100], empty CSV import
    status_code = 422


class NotFoundError(ExpiryGuardError):
    status_code = 404


class ConflictError(ExpiryGuardError):
    # discounting a product that was already donated
    status_code = 409


class StoreError(ExpiryGuardError):
    # the database read/write itself failed
    status_code = 503
