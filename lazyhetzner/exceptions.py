"""Custom exception hierarchy for lazyhetzner.

Exception Hierarchy:
    LazyHetznerError (base)
    ├── ProviderError - Hetzner Cloud API calls
    │   ├── ResourceFetchError (retryable)
    │   └── ResourceNotFoundError
    ├── ConfigurationError - project config file
    │   ├── ConfigLoadError
    │   └── ConfigSaveError
    └── ActionError - context menu side effects
        ├── MissingFieldError
        ├── ClipboardError
        └── ProcessLaunchError

Provider and configuration errors escalate to the full-screen error phase.
Action errors are shown as a status notice and leave navigation untouched.

Usage:
    from lazyhetzner.exceptions import ResourceNotFoundError

    if server is None:
        raise ResourceNotFoundError("server not found", resource_id=42)
"""

from typing import Any, Optional


class LazyHetznerError(Exception):
    """Base exception for all lazyhetzner errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., IDs, paths)
        retryable: Whether this error might succeed on retry
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        self.message = message
        self.context = context
        self.retryable = retryable
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# =============================================================================
# Provider Errors
# =============================================================================


class ProviderError(LazyHetznerError):
    """Base exception for resource provider calls."""

    pass


class ResourceFetchError(ProviderError):
    """Listing or fetching resources failed."""

    def __init__(
        self,
        message: str = "Failed to fetch resources",
        *,
        kind: Optional[str] = None,
        code: Optional[str] = None,
        **context: Any,
    ) -> None:
        if kind:
            context["kind"] = kind
        if code:
            context["code"] = code
        super().__init__(message, retryable=True, **context)


class ResourceNotFoundError(ProviderError):
    """A resource vanished between listing and re-fetching it."""

    def __init__(
        self,
        message: str = "Resource not found",
        *,
        kind: Optional[str] = None,
        resource_id: Optional[int] = None,
        **context: Any,
    ) -> None:
        if kind:
            context["kind"] = kind
        if resource_id is not None:
            context["resource_id"] = resource_id
        super().__init__(message, **context)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(LazyHetznerError):
    """Base exception for project configuration issues."""

    pass


class ConfigLoadError(ConfigurationError):
    """The config file exists but could not be read or parsed."""

    def __init__(
        self,
        message: str = "Failed to load configuration",
        *,
        path: Optional[str] = None,
        **context: Any,
    ) -> None:
        if path:
            context["path"] = path
        super().__init__(message, **context)


class ConfigSaveError(ConfigurationError):
    """The config file could not be written."""

    def __init__(
        self,
        message: str = "Failed to save configuration",
        *,
        path: Optional[str] = None,
        **context: Any,
    ) -> None:
        if path:
            context["path"] = path
        super().__init__(message, **context)


# =============================================================================
# Action Errors
# =============================================================================


class ActionError(LazyHetznerError):
    """Base exception for context menu side effects."""

    pass


class MissingFieldError(ActionError):
    """The field an action needs is empty on the fresh resource."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        # field is kept off the message: notices are shown verbatim
        super().__init__(message)
        self.field = field


class ClipboardError(ActionError):
    """Writing to the system clipboard failed."""

    def __init__(self, message: str = "Failed to copy to clipboard", **context: Any) -> None:
        super().__init__(message, **context)


class ProcessLaunchError(ActionError):
    """Starting an external process (terminal, tmux, zellij, ssh) failed."""

    def __init__(
        self,
        message: str = "Failed to launch process",
        *,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        **context: Any,
    ) -> None:
        if command:
            context["command"] = command[:100] + "..." if len(command) > 100 else command
        if exit_code is not None:
            context["exit_code"] = exit_code
        super().__init__(message, **context)
