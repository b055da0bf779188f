"""Exception hierarchy for the authentication layer."""


class AuthError(Exception):
    """Base class for all coral-auth errors."""


class DatabaseConnectionError(AuthError):
    """The database could not be reached at startup."""


class UserLookupError(AuthError):
    """The user store failed while loading a session user."""


class UnknownStrategyError(AuthError):
    """No strategy is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown authentication strategy '{name}'")
        self.name = name


class StrategyRejection(AuthError):
    """Raised by credential extraction to reject a login without an error.

    Used for missing form fields or a provider-side denial (the user
    cancelled the OAuth dialog). Converted into a ``Rejected`` outcome.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class EmailAlreadyRegisteredError(AuthError):
    """A local account already exists for this email."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already registered: {email}")
        self.email = email
