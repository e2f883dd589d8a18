"""Exception hierarchy for cargomelos."""

from __future__ import annotations


class CargoMelosError(Exception):
    """Base class for all cargomelos errors.

    Attributes:
        message: Human readable error message.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(CargoMelosError):
    """Invalid workspace configuration."""

    def __init__(self, message: str, path: str | None = None) -> None:
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path


class WorkspaceNotFoundError(CargoMelosError):
    """No Cargo workspace could be located, or it has no members."""


class ManifestError(CargoMelosError):
    """A manifest has a shape that makes rewriting unsafe."""


class PackageNotFoundError(CargoMelosError):
    """A package could not be found in the workspace."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(message or f"unable to find package {name}")
        self.name = name


class CyclicDependencyError(CargoMelosError):
    """Local path dependencies form a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(f"cyclic dependency detected: {' -> '.join(cycle)}")
        self.cycle = cycle


class VersionError(CargoMelosError):
    """A version or version requirement could not be parsed."""


class CargoError(CargoMelosError):
    """The cargo executable could not be run."""

    def __init__(self, message: str, args: list[str] | None = None) -> None:
        if args:
            message = f"unable to run cargo command with args {args}, got {message}"
        super().__init__(message)
        self.args_text = args or []


class UpdateError(CargoMelosError):
    """`cargo update` reported an error."""

    def __init__(self) -> None:
        super().__init__("unable to update Cargo.lock")


class BuildError(CargoMelosError):
    """A package failed to build while verifying it."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unable to build package {name}")
        self.name = name


class PublishError(CargoMelosError):
    """A package could not be published."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(message or f"unable to publish package {name}")
        self.name = name


class PublishTimeoutError(CargoMelosError):
    """The registry never showed a published version before the deadline."""

    def __init__(self, name: str, version: str, timeout: float) -> None:
        super().__init__(
            f"timed out after {timeout:g}s waiting for {name} v{version} to appear in the registry"
        )
        self.name = name
        self.version = version


class RegistryError(CargoMelosError):
    """The package registry could not be queried."""


class GitError(CargoMelosError):
    """A git operation failed."""

    def __init__(self, message: str, command: str | None = None) -> None:
        super().__init__(message)
        self.command = command


class PromptCancelledError(CargoMelosError):
    """The user cancelled an interactive prompt."""

    def __init__(self) -> None:
        super().__init__("prompt cancelled")
