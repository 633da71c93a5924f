"""Exceptions for pimcodec library."""


class CodecError(Exception):
    """Base exception for all pimcodec errors."""


class CodecParseError(CodecError):
    """Exception raised when parsing vCard or iCalendar content.

    The 'message' attribute contains a human-readable message about the
    error that occurred. The 'detailed_error' attribute can provide additional
    information about the error, such as the offending content line, useful
    for debugging purposes.

    The record parsers never let this escape to the caller for malformed
    wire content; it is converted into an entry of the parse error list.
    """

    def __init__(self, message: str, *, detailed_error: str | None = None) -> None:
        """Initialize the CodecParseError with a message."""
        super().__init__(message)
        self.message = message
        self.detailed_error = detailed_error


class CodecGenerateError(CodecError):
    """Exception raised when a record cannot be generated.

    Generation only fails when a record is missing the property its format
    requires (FN for a vCard, SUMMARY for a VTODO or VEVENT). Every other
    field that cannot be encoded is omitted from the output instead.
    """


class ParameterValueError(ValueError):
    """Exception raised when a property parameter makes a value invalid.

    A value may look fine on its own but be unusable given its parameters,
    for example "DTSTART;TZID=Mars/Olympus:20250601T171819" where the
    timezone is unknown. This is distinguished from a plain ValueError so
    the error reported for the field names the parameter at fault.
    """
