"""Errors raised by mpd-brainz."""


class MPDBrainzError(Exception):
    """Base class for mpd-brainz errors."""


class ConfigError(MPDBrainzError):
    """Invalid configuration or missing ListenBrainz token."""


class FetchError(MPDBrainzError):
    """MPD is unreachable or returned an unusable answer."""


class ParseError(MPDBrainzError, ValueError):
    """A historical record holds a malformed value."""


class SubmissionError(MPDBrainzError):
    """ListenBrainz refused a submission or could not be reached."""

    def __init__(
        self, message: str, status_code: int | None = None, reason: str = ""
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class SubmissionTransportError(SubmissionError):
    """The request never got an HTTP answer (DNS, connect, timeout)."""
