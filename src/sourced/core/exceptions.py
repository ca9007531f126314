"""sourced exception hierarchy."""

from __future__ import annotations


class SourcedError(Exception):
    """Base exception for all sourced errors."""


class ConfigError(SourcedError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested configuration file does not exist."""


# ---------------------------------------------------------------------------
# Environment (fail-fast, never retried)
# ---------------------------------------------------------------------------


class WorkdirError(SourcedError):
    """Raised when the working directory cannot be used to run compose."""


class WorkdirNotFoundError(WorkdirError):
    """The working directory does not exist."""


class WorkdirInvalidError(WorkdirError):
    """The working directory path exists but is not a usable directory."""


class WorkdirMalformedError(WorkdirError):
    """The working directory is missing files compose needs."""


# ---------------------------------------------------------------------------
# Orchestration tool
# ---------------------------------------------------------------------------


class ComposeError(SourcedError):
    """Raised when a compose invocation fails."""

    def __init__(
        self, message: str, args: tuple[str, ...] = (), returncode: int | None = None, stderr: str = ""
    ) -> None:
        super().__init__(message)
        self.command_args = args
        self.returncode = returncode
        self.stderr = stderr


# ---------------------------------------------------------------------------
# Monitoring and readiness
# ---------------------------------------------------------------------------


class ServiceError(SourcedError):
    """Base for failures attributed to one service of the stack."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(message)
        self.service = service


class ServiceUnhealthyError(ServiceError):
    """A service entered a state it is not expected to be in."""

    def __init__(self, service: str, state: str, exit_code: str | None = None) -> None:
        if exit_code is not None:
            message = f"service '{service}' exited with return code: {exit_code}"
        else:
            message = f"service '{service}' is in state '{state}'"
        super().__init__(service, message)
        self.state = state
        self.exit_code = exit_code


class ServiceStatusError(ServiceError):
    """The status of a service could not be queried."""

    def __init__(self, service: str, cause: Exception) -> None:
        super().__init__(service, f"cannot get status service {service}: {cause}")


class DiscoveryError(SourcedError):
    """The list of services could not be obtained."""


class AddressNotFoundError(SourcedError):
    """Compose reported no public address for the UI container."""


class BrowserLaunchError(SourcedError):
    """The default browser could not be opened."""


class UITimeoutError(SourcedError):
    """Nothing conclusive happened before the timeout elapsed."""

    def __init__(self, container: str, timeout: float) -> None:
        super().__init__(
            f"error opening the UI, the container {container} is not running after {timeout:g}s"
        )
        self.container = container
        self.timeout = timeout
