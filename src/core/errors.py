"""Error taxonomy shared by the core and the adapters.

Every failure is terminal for a single invocation: nothing here is retried.
The CLI catches `GlPipelineError` once and prints `str(exc)`, so each error
carries enough context (path, token, URL, raw body) to diagnose on its own.
"""

from __future__ import annotations

from pathlib import Path


class GlPipelineError(Exception):
    """Base class for all expected failures."""


class ConfigError(GlPipelineError):
    """Missing or unreadable configuration input (token file, project file)."""


class ProjectDirectoryNotFound(ConfigError):
    """The project file does not exist. Callers treat it as an empty directory."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Project file not found: {path}")
        self.path = path


class ProjectDirectoryParseError(ConfigError):
    """The project file exists but is not well-formed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid project file {path}: {reason}")
        self.path = path
        self.reason = reason


class GitContextError(GlPipelineError):
    """Remote URL or branch could not be read from the local repository."""


class IdentityUnresolved(GlPipelineError):
    """No project id could be determined by any method."""


class MissingBranch(GlPipelineError):
    """An explicit project id was given but no ref could be determined."""


class InvalidVariableSyntax(GlPipelineError):
    def __init__(self, token: str) -> None:
        super().__init__(f"Invalid pipeline variable {token!r}: expected KEY=VALUE")
        self.token = token


class InvalidRequest(GlPipelineError):
    """The pipeline request cannot be built (e.g. empty ref)."""


class TransportError(GlPipelineError):
    """The request never got an HTTP response (DNS, TLS, timeout, ...)."""


class ApiError(GlPipelineError):
    """GitLab answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"GitLab API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class DecodeError(GlPipelineError):
    """A 2xx response whose body is not a pipeline object."""

    def __init__(self, reason: str, body: str) -> None:
        super().__init__(f"Cannot decode GitLab response ({reason}): {body}")
        self.reason = reason
        self.body = body
