# wavy/errors.py


class TokenWorkflowError(Exception):
    """
    Raised when a single-use token cannot be consumed.

    Rendered as ``{"success": false, "error": ..., "message": ...}`` so the
    frontend can show ``message`` to the user as-is.
    """

    def __init__(self, error: str, message: str, status_code: int = 400, **extra):
        super().__init__(error)
        self.error = error
        self.message = message
        self.status_code = status_code
        self.extra = extra


class FilterError(ValueError):
    """Malformed filter, ordering or column reference on the generic table endpoint."""


class TableAccessDenied(Exception):
    """The caller may not use this table (or this table is not exposed at all)."""

    def __init__(self, table: str, message: str = "Table non autorisée"):
        super().__init__(message)
        self.table = table
        self.message = message


class EmailDeliveryError(RuntimeError):
    """The email provider rejected or failed a send."""
