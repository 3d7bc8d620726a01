"""Exception hierarchy for the Ethakka scaffolder.

Every error the scaffolding engine raises derives from ``EthakkaError`` so
the CLI can report them uniformly.  ``AnchorNotFound`` is the one member that
is never raised by the patcher: it is returned as a warning alongside the
patched text.
"""

from __future__ import annotations


class EthakkaError(Exception):
    """Base class for all scaffolder errors."""


class NameValidationError(EthakkaError):
    """Raised when a raw unit/project name fails the token pattern."""

    def __init__(self, name: str, pattern: str) -> None:
        self.name = name
        self.pattern = pattern
        super().__init__(
            f"Invalid name '{name}': needs at least one lowercase letter and may only "
            f"include lowercase letters, numbers, underscores and hyphens (pattern {pattern})."
        )


class ConflictError(EthakkaError):
    """Raised when a target path exists and overwriting was declined."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"{path} already exists and was not overwritten.")


class UnsupportedStrategyError(EthakkaError):
    """Raised when a strategy key does not match any registered variant."""

    def __init__(self, kind: str, key: str, valid_keys: list[str]) -> None:
        self.kind = kind
        self.key = key
        self.valid_keys = list(valid_keys)
        super().__init__(
            f"Unsupported {kind}: '{key}'. "
            f"Valid options: {', '.join(self.valid_keys)}"
        )


class AnchorNotFound(EthakkaError):
    """The registration list anchor was missing from an aggregator file."""

    def __init__(self, identifier: str, anchor: str) -> None:
        self.identifier = identifier
        self.anchor = anchor
        super().__init__(
            f"Could not find '{anchor}' in the aggregator. The import for "
            f"{identifier} was added; add {identifier} to the registration "
            f"list manually."
        )


class ExternalProcessError(EthakkaError):
    """Raised when an external command (e.g. dependency install) fails."""

    def __init__(self, command: str, detail: str = "") -> None:
        self.command = command
        self.detail = detail
        message = f"Command failed: {command}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ProjectNotFoundError(EthakkaError):
    """Raised when a workflow that needs a generated project runs outside one."""

    def __init__(self, root: str, marker: str) -> None:
        self.root = root
        self.marker = marker
        super().__init__(
            f"{root} is not a generated project ({marker} not found). "
            f"Run this command inside the project directory."
        )


class WorkflowError(EthakkaError):
    """Raised when a workflow step fails irrecoverably."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"Step '{step}' failed: {message}")
