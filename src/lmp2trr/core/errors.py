"""
Exception classes for dump-to-TRR conversion.
"""
from typing import Optional


class ConversionError(Exception):
    """Base exception for conversion failures."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            'error': type(self).__name__,
            'message': self.message,
            'details': self.details
        }


class OpenError(ConversionError):
    """An input or output resource could not be acquired."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
        if path is not None:
            self.details['path'] = str(path)


class InputOpenError(OpenError):
    pass


class OutputOpenError(OpenError):
    pass


class SchemaIncompleteError(ConversionError):
    """Column discovery did not produce a usable schema."""


class MissingColumnError(SchemaIncompleteError):
    def __init__(self, field: str, header=None):
        message = f"No column in the ATOMS header binds field '{field}'"
        if header:
            message += f" (header: {' '.join(header)})"
        super().__init__(message)
        self.field = field
        self.details['field'] = field


class AmbiguousColumnError(SchemaIncompleteError):
    def __init__(self, field: str, token: str):
        super().__init__(f"Column '{token}' for field '{field}' appears more than once in the ATOMS header")
        self.field = field
        self.token = token
        self.details.update({'field': field, 'token': token})


class MalformedSectionError(ConversionError):
    """A section body could not be decoded."""

    def __init__(self, reason: str, line_number: Optional[int] = None):
        where = f"line {line_number}: " if line_number is not None else ""
        super().__init__(f"{where}{reason}")
        self.reason = reason
        self.line_number = line_number
        if line_number is not None:
            self.details['line_number'] = line_number


class UnsupportedBoxError(ConversionError):
    """Only orthorhombic boxes can be converted."""


class AtomCountChangedError(ConversionError):
    def __init__(self, expected: int, found: int):
        super().__init__(f"Atom count changed from {expected} to {found}; "
                         f"trajectories with a varying number of atoms are not supported")
        self.expected = expected
        self.found = found
        self.details.update({'expected': expected, 'found': found})


class SinkWriteError(ConversionError):
    """The trajectory writer failed to store a frame."""

    def __init__(self, message: str, frame_index: Optional[int] = None):
        if frame_index is not None:
            message = f"Writing frame {frame_index} failed: {message}"
        super().__init__(message)
        self.frame_index = frame_index
        if frame_index is not None:
            self.details['frame_index'] = frame_index
