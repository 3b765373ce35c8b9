class ProcessorError(Exception):
    """Base exception for errors that fail an extraction job."""


class JobNotFoundError(ProcessorError):
    """Raised when an upload cannot be found in the database."""


class InvalidFileReferenceError(ProcessorError):
    """Raised when a file reference cannot be resolved or has an unsupported type."""


class FileDownloadError(ProcessorError):
    """Raised when remote file bytes cannot be fetched."""


class PersistenceError(ProcessorError):
    """Raised when extracted responses cannot be written."""


class InvalidJobStateError(ProcessorError):
    """Raised when an upload in a terminal state is run without a retry request."""
