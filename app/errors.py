"""Errors raised by the link store operations.

Each class carries the HTTP status it maps to, so the web layer can render
any of them with a single exception handler.
"""


class LinkError(Exception):
    status_code = 500
    detail = "Server error"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class InvalidInput(LinkError):
    status_code = 400
    detail = "Invalid input"


class CodeConflict(LinkError):
    status_code = 409
    detail = "Code already exists"


class AllocationExhausted(LinkError):
    status_code = 500
    detail = "Unable to generate unique code"


class NotFound(LinkError):
    status_code = 404
    detail = "Not found"


class ServerError(LinkError):
    status_code = 500
    detail = "Server error"
