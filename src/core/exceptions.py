"""
Exception hierarchy shared by the collector, comparator and registry sources.
"""


class RegBaselineError(Exception):
    """Base exception for all regbaseline errors."""
    pass


class ConfigurationError(RegBaselineError):
    """Raised when configuration or a watch-target file is invalid."""
    pass


class BaselineFormatError(RegBaselineError):
    """Raised when a serialized baseline cannot be read or is structurally invalid."""
    pass


class BaselineRecordError(RegBaselineError, ValueError):
    """Raised when a baseline record violates its invariants."""
    pass


class RegistrySourceError(RegBaselineError):
    """Base exception for registry source failures."""

    def __init__(self, path: str, message: str = ""):
        self.path = path
        super().__init__(f"{message or 'Registry error'}: {path}")


class RegistryKeyNotFoundError(RegistrySourceError):
    """Raised when a key is not present in the source."""

    def __init__(self, path: str):
        super().__init__(path, "Key not found")


class RegistryAccessError(RegistrySourceError):
    """Raised when a key exists but cannot be read (permissions, corruption)."""

    def __init__(self, path: str, reason: str = ""):
        self.reason = reason
        message = "Access denied"
        if reason:
            message += f" ({reason})"
        super().__init__(path, message)


class RegistrySourceUnavailableError(RegBaselineError):
    """Raised when a registry backend cannot be used on this host."""

    def __init__(self, source_name: str, install_hint: str = ""):
        self.source_name = source_name
        self.install_hint = install_hint
        message = f"Registry source '{source_name}' is not available"
        if install_hint:
            message += f"\n{install_hint}"
        super().__init__(message)
