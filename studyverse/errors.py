"""Error taxonomy for the study session core.

Every condition here is recoverable: the caller either fixes the request,
upgrades the plan, or retries. ``user_message`` is safe to show as-is.
"""


class StudyVerseError(Exception):
    """Base class for every error signalled by the session core."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)


class InvalidRequest(StudyVerseError):
    """Required study request fields are missing."""

    user_message = "Please fill in at least Subject, Class, and Chapter Name."

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"{self.user_message} Missing: {', '.join(self.missing_fields)}"
        )


class QuotaExceeded(StudyVerseError):
    """The account has no credits left."""

    user_message = (
        "You have used all your generations. Upgrade your plan for more."
    )


class GenerationFailed(StudyVerseError):
    """The generation collaborator failed during a stream or batch call."""

    user_message = (
        "Failed to generate content. Please check your inputs and try again."
    )


class InvalidGenerationResult(GenerationFailed):
    """The collaborator returned a malformed quiz payload."""


class GenerationInProgress(StudyVerseError):
    """A generation is already running for this session."""

    user_message = "A generation is already running. Please wait for it to finish."


class PersistenceReadError(StudyVerseError):
    """A stored document could not be parsed into the expected shape."""


class PersistenceWriteError(StudyVerseError):
    """A document could not be written to the store."""

    user_message = "Your work could not be saved. Please try again."


class HistoryNotFound(StudyVerseError):
    """No history item exists with the requested id."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"History item not found: {item_id}")
