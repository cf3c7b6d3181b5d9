"""Domain-specific errors for flagctl."""

from __future__ import annotations

from collections.abc import Sequence


class FlagctlError(Exception):
    """Base error for flagctl."""


class CatalogValidationError(FlagctlError):
    """Raised when a flag catalog does not conform to schema or semantics."""


class CatalogLoadError(FlagctlError):
    """Raised when reading catalog sources fails."""


class FlagNotFoundError(FlagctlError):
    """Raised when a flag key is not present in the catalog."""


class NullInputError(FlagctlError):
    """Raised when the resolver is called without a flag or a catalog."""


class DependencyBlockedError(FlagctlError):
    """Raised when a flag cannot be enabled because prerequisites are off."""

    def __init__(self, flag_key: str, missing: Sequence[str]) -> None:
        self.flag_key = flag_key
        self.missing = tuple(missing)
        super().__init__(
            f"Cannot enable '{flag_key}'. The following dependencies must be enabled first: "
            + ", ".join(self.missing)
        )


class TemplateLibraryError(FlagctlError):
    """Raised when a board template library cannot be read."""


class TemplateNotFoundError(TemplateLibraryError):
    """Raised when a named or indexed template does not exist."""


class ConfigurationStoreError(FlagctlError):
    """Raised when a saved configuration cannot be written or found."""
