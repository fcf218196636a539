"""
Custom exceptions for the im-/export framework.
"""


class ImExportError(Exception):
    """
    Base exception for all im-/export errors.

    ``recoverable`` tells callers whether the failure is a normal, reportable
    condition or a defect that should stop the process.
    """

    recoverable = True


class InvalidArgumentError(ImExportError, ValueError):
    """
    Invalid input to a registry or mapper operation.

    Raised when:
    - A table manager to register is None
    - A table name cannot be resolved when generating a mapping file
    - A progress counter is moved backwards
    """
    pass


class InvalidStateError(ImExportError, RuntimeError):
    """
    Operation attempted before the required setup.

    Raised when:
    - An im-/exporter is constructed while no table manager is registered
    - A table lookup happens on an empty registry
    """

    recoverable = False


class MalformedMappingError(ImExportError):
    """
    Mapping file content does not form a flat, bijective string mapping.

    Carries the structured error report that observers receive.
    """

    def __init__(self, message: str, report=None):
        super().__init__(message)
        self.report = report


class CriticalIOError(ImExportError):
    """
    A mapping file vanished between the existence check and the read.

    File existence is validated before loading, so this signals a bug rather
    than a user error.
    """

    recoverable = False

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path
