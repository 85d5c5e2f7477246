"""
Failures the engines can report.

Every engine operation validates before it copies, so raising one of these
means the caller's document was left exactly as it was.
"""


class GatheringError(Exception):
    error_code = "GATHERING_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "message": self.message}


class InvalidTarget(GatheringError):
    """Unknown event, poll, option or response value."""

    error_code = "INVALID_TARGET"


class ExpiredPoll(GatheringError):
    """Mutation attempted on a poll whose end_date has passed."""

    error_code = "EXPIRED_POLL"


class MissingIdentityContext(GatheringError):
    """Action without a connection identity or display name."""

    error_code = "MISSING_IDENTITY"


class AddOptionsDisabled(GatheringError):
    error_code = "ADD_OPTIONS_DISABLED"


class InvalidContent(GatheringError):
    """Blank titles, questions or option texts."""

    error_code = "INVALID_CONTENT"
