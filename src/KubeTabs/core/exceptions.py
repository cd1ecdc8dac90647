"""KubeTabs Core Custom Exceptions"""


class KubeTabsError(Exception):
    """Base class for all KubeTabs application-specific exceptions."""


class ConfigurationError(KubeTabsError):
    """Custom exception for configuration errors."""


class DiscoveryError(KubeTabsError):
    """Raised when the resource catalog cannot be built from the API server."""


class AmbiguousGroupVersion(DiscoveryError):
    """Raised when an API group declares neither a preferred nor any version."""

    def __init__(self, group: str) -> None:
        super().__init__(f"API group '{group}' declares no versions")
        self.group = group


class UnresolvedAlias(KubeTabsError, KeyError):
    """Raised when a typed resource name matches no catalog entry."""

    def __init__(self, alias: str) -> None:
        super().__init__(alias)
        self.alias = alias

    def __str__(self) -> str:
        return f"Unknown resource '{self.alias}'"


class FetchError(KubeTabsError):
    """Raised when a table request fails at the transport or status level."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class DecodeError(KubeTabsError):
    """Raised when a table payload does not match the expected schema."""


class InputChannelClosed(KubeTabsError):
    """Raised when the key event channel is closed while waiting for input."""
