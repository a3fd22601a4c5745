class InvalidInputError(ValueError):
    pass


class InvalidEmailError(InvalidInputError):
    def __init__(self, message: str = "Invalid email") -> None:
        super().__init__(message)


class VerificationError(ValueError):
    """A submitted code was not accepted. ``str(exc)`` is safe to show."""

    default_message = "Verification failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class CodeNotFoundError(VerificationError):
    default_message = "Code not found"


class CodeExpiredError(VerificationError):
    default_message = "Code expired"


class CodeMismatchError(VerificationError):
    default_message = "Invalid code"


class IdentityConflictError(ValueError):
    pass


class PersistenceError(RuntimeError):
    pass


class EmailSendError(RuntimeError):
    pass
