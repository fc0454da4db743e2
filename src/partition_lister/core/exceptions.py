"""Exception hierarchy for partition-lister."""


class PartitionListerError(Exception):
    """Base exception for all partition-lister errors."""

    pass


class ValidationError(PartitionListerError):
    """Raised when validation fails."""

    pass


class ConfigurationError(PartitionListerError):
    """Raised when a required setting is missing or invalid."""

    pass


class FormatError(PartitionListerError):
    """Raised when an output format is unknown or a record cannot be parsed."""

    pass


class ListingError(PartitionListerError):
    """Raised when the object store fails while enumerating a prefix."""

    pass


class OutputTargetError(PartitionListerError):
    """Raised when a job's output target cannot be created or opened."""

    pass


class QueueClosedError(PartitionListerError):
    """Raised when a closed job queue is written to or closed again."""

    pass


class CompletionError(PartitionListerError):
    """Raised when a worker reports completion more than once."""

    pass
