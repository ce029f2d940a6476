"""Domain-specific exception types."""


class TaskPulseError(Exception):
    """Base application error."""


class ValidationError(TaskPulseError):
    """Raised when required input is missing or malformed."""


class PreconditionError(TaskPulseError):
    """Raised when an operation is invalid in the current state."""


class RepositoryError(TaskPulseError):
    """Raised when the persistence collaborator fails."""


class SettingsError(TaskPulseError):
    """Raised when settings cannot be validated or saved."""


class ImportFormatError(ValidationError):
    """Raised when an exported document cannot be read into records."""
