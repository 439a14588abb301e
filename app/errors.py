class TutorError(Exception):
    """Base class for typing tutor errors."""


class StorageError(TutorError):
    """Raised by persistence helpers when a read or write fails."""
