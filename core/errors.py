# core/errors.py
"""Exception hierarchy shared by the execution pipeline."""

from __future__ import annotations


class PromptlineError(Exception):
    """Base class for all Promptline errors."""


class ConfigurationError(PromptlineError):
    """Invalid execution options, missing model identifier or credential."""


class UnsupportedBackend(PromptlineError):
    """Raised when a model identifier has no registered backend."""

    def __init__(self, model_name: str) -> None:
        super().__init__(f"Unsupported model: {model_name}")
        self.model_name = model_name


class BackendDispatchError(PromptlineError):
    """A backend call failed at the transport, HTTP or payload level."""

    def __init__(
        self,
        message: str,
        *,
        model_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.model_name = model_name
        self.status_code = status_code
