"""Exception hierarchy for installer asset generation.

These exceptions provide a domain-specific error surface for the asset store
and the assets it drives, so callers can catch a single base error when
appropriate.

Exceptions
----------
InstallerAssetError
ConfigurationError
InvalidPlatformError
CredentialError
SerializationError
AssetGraphError
UndeclaredDependencyError

Examples
--------
>>> raise InvalidPlatformError("invalid Platform: libvirt")
"""

from __future__ import annotations


class InstallerAssetError(Exception):
    """Base error for installer asset generation.

    Parameters
    ----------
    message
        Human-readable error message naming the asset and the failing step.

    Examples
    --------
    >>> raise InstallerAssetError("failed to create Cloud Provider Config manifest")
    """


class ConfigurationError(InstallerAssetError):
    """Raised when the install configuration cannot be used as given.

    Examples
    --------
    >>> raise ConfigurationError("install-config.yaml is missing metadata.name")
    """


class InvalidPlatformError(ConfigurationError):
    """Raised when no platform builder is registered for a platform name."""


class CredentialError(InstallerAssetError):
    """Raised when platform credentials or a provider session are unavailable.

    Examples
    --------
    >>> raise CredentialError("azure credentials are missing tenantId")
    """


class SerializationError(InstallerAssetError):
    """Raised when a manifest or configuration blob cannot be encoded."""


class AssetGraphError(InstallerAssetError):
    """Raised when the asset dependency graph cannot be resolved."""


class UndeclaredDependencyError(LookupError):
    """Raised when an asset fetches a parent it did not declare.

    This signals a programming error in the asset rather than a runtime
    condition, and is not an :class:`InstallerAssetError`.
    """
