"""Recoverable errors raised by the shortening and credential services."""


class BingoError(Exception):
    """Base class for Topic Bingo errors; ``message`` is safe to show users."""

    default_message = "Something went wrong."

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredentialError(BingoError):
    default_message = "Please add your OpenAI API key before converting topics."


class MalformedResponseError(BingoError):
    default_message = "The AI service returned short topics that could not be used."


class UnsupportedError(BingoError):
    default_message = "Unable to generate a short topic at this time."


class StoreUnavailableError(BingoError):
    default_message = "The credential store is not available."


class ConversionInProgressError(BingoError):
    default_message = "A topic conversion is already running."
