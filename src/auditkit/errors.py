"""Exception types raised by auditkit."""


class AuditKitError(Exception):
    """Base class for auditkit errors."""
    pass


class CheckerError(AuditKitError):
    """A checker could not evaluate its service (permissions, service disabled, bad response)."""

    def __init__(self, checker_name: str, message: str):
        self.checker_name = checker_name
        super().__init__(message)


class CheckerTimeoutError(CheckerError):
    """A checker did not finish before its deadline."""
    pass


class ScanCancelledError(AuditKitError):
    """The scan was cancelled before every checker finished."""
    pass


class MappingTableError(AuditKitError):
    """A framework mapping table is internally inconsistent."""
    pass


class UnknownFrameworkError(AuditKitError):
    """The requested framework is not present in the mapping table."""

    def __init__(self, framework: str, supported: list[str]):
        self.framework = framework
        self.supported = supported
        super().__init__(
            f"Unknown framework: {framework}. Supported: {', '.join(supported)}"
        )


class CacheError(AuditKitError):
    """A cached report could not be read or written."""
    pass
