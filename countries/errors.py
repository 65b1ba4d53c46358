import enum


class ErrorKind(enum.Enum):
    SOURCE_UNAVAILABLE = "source_unavailable"
    SOURCE_TIMEOUT = "source_timeout"
    MALFORMED_RESPONSE = "malformed_response"
    RECORD_WRITE_FAILURE = "record_write_failure"
    NOT_FOUND = "not_found"


class CountryError(Exception):
    """Base class for every error raised by the countries app."""
    kind = None

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class SourceError(CountryError):
    """An external data source could not supply a usable payload.

    Always fatal for a refresh batch: raised before anything is written.
    """

    def __init__(self, source, message, details=None):
        super().__init__(f"{source}: {message}", details)
        self.source = source


class SourceUnavailable(SourceError):
    kind = ErrorKind.SOURCE_UNAVAILABLE


class SourceTimeout(SourceError):
    kind = ErrorKind.SOURCE_TIMEOUT


class MalformedResponse(SourceError):
    kind = ErrorKind.MALFORMED_RESPONSE


class RecordWriteFailure(CountryError):
    """A single country could not be persisted; the batch carries on."""
    kind = ErrorKind.RECORD_WRITE_FAILURE

    def __init__(self, name, details=None):
        super().__init__(f"Could not save country {name!r}", details)
        self.name = name


class NotFound(CountryError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, name):
        super().__init__("Country not found")
        self.name = name
