"""
Custom exception classes and FastAPI exception handlers.

Two kinds of errors live here:

  - Errors raised *inside* service actions (DuplicateEmailError,
    InvalidCredentialsError, BankNotFoundError, UnauthorizedAccessError,
    VendorError). Actions catch everything, log it, and return None, so
    these never reach a client directly; they exist so the log line says
    what actually went wrong.

  - Errors raised at the HTTP edge (NotAuthenticatedError,
    ActionFailedError, and InvalidCredentialsError for a failed sign-in).
    Routers raise these when there is no valid session or when an action
    returned None, and the handlers below turn them into
    JSON responses.

Exception hierarchy:
    BankdashError (base)
    ├── NotAuthenticatedError    — no valid session cookie
    ├── ActionFailedError        — a server action returned None
    ├── DuplicateEmailError      — sign-up with a registered email
    ├── InvalidCredentialsError  — wrong email or password
    ├── BankNotFoundError        — bank document lookup failed
    ├── UnauthorizedAccessError  — bank belongs to another user
    └── VendorError              — Plaid/Dwolla returned no usable result
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BankdashError(Exception):
    """Base exception for all Bankdash domain errors."""

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# HTTP-edge exceptions
# ---------------------------------------------------------------------------

class NotAuthenticatedError(BankdashError):
    """Raised when a request has no valid session."""

    def __init__(self):
        super().__init__("Not signed in")


class ActionFailedError(BankdashError):
    """Raised by a router when the underlying server action returned None."""

    def __init__(self, detail: str):
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Action-internal exceptions
# ---------------------------------------------------------------------------

class DuplicateEmailError(BankdashError):
    """Raised when attempting to register with an email that's already in use."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


class InvalidCredentialsError(BankdashError):
    """Raised when sign-in credentials are incorrect."""

    def __init__(self):
        super().__init__("Invalid email or password")


class BankNotFoundError(BankdashError):
    """Raised when a bank document cannot be found."""

    def __init__(self, lookup: str):
        self.lookup = lookup
        super().__init__(f"Bank {lookup} not found")


class UnauthorizedAccessError(BankdashError):
    """Raised when a user attempts to use a bank they don't own."""

    def __init__(self, detail: str = "You do not have access to this resource"):
        super().__init__(detail)


class VendorError(BankdashError):
    """Raised when a vendor call succeeds at the HTTP level but yields nothing usable."""

    def __init__(self, detail: str):
        super().__init__(detail)


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Responses share one shape: {"detail": "...", "error_type": "..."}
    """

    @app.exception_handler(NotAuthenticatedError)
    async def not_authenticated_handler(
        request: Request, exc: NotAuthenticatedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": exc.detail, "error_type": "not_authenticated"},
        )

    @app.exception_handler(InvalidCredentialsError)
    async def invalid_credentials_handler(
        request: Request, exc: InvalidCredentialsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": exc.detail, "error_type": "invalid_credentials"},
        )

    @app.exception_handler(ActionFailedError)
    async def action_failed_handler(
        request: Request, exc: ActionFailedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": exc.detail, "error_type": "action_failed"},
        )
