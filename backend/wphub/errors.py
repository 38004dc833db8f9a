"""Typed errors raised by the remote site bridge.

Every error carries an HTTP-style ``status_code`` and a stable ``code`` so the
API layer can render it without knowing the concrete type.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for remote site bridge errors."""

    status_code: int = 500
    code: str = "bridge_error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class UnauthorizedError(BridgeError):
    """No authenticated identity is attached to the request."""

    status_code = 401
    code = "unauthorized"


class SiteNotFoundError(BridgeError):
    """The site does not exist or is not owned by the caller."""

    status_code = 404
    code = "site_not_found"


class SiteNotConnectedError(BridgeError):
    """The site has no stored credentials yet."""

    status_code = 409
    code = "site_not_connected"


class MissingParametersError(BridgeError):
    """The connection callback lacks required parameters."""

    status_code = 400
    code = "missing_parameters"

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing callback parameters: {', '.join(missing)}")


class NoMatchingSiteError(BridgeError):
    """The connection callback cannot be associated with any owned site."""

    status_code = 404
    code = "no_matching_site"


class RemoteFailedError(BridgeError):
    """The execution backend or the remote WordPress API reported an error."""

    status_code = 502
    code = "remote_failed"

    def __init__(self, remote_status: int, message: str) -> None:
        self.remote_status = remote_status
        super().__init__(message)


class MalformedResponseError(RemoteFailedError):
    """A response body arrived but was not valid JSON."""

    code = "malformed_response"

    def __init__(self, remote_status: int, raw_body: str) -> None:
        self.raw_body = raw_body
        super().__init__(remote_status, f"Malformed response body: {raw_body}")


class NoResponseError(BridgeError):
    """No terminal response arrived in time; the remote outcome is unknown."""

    status_code = 504
    code = "no_response"

    def __init__(self, command: str, attempts: int) -> None:
        self.command = command
        self.attempts = attempts
        super().__init__(
            f"Could not confirm the result of {command!r} after {attempts} status checks"
        )


class BusyError(BridgeError):
    """A change for the same resource is already in flight."""

    status_code = 409
    code = "busy"

    def __init__(self, site_id: str, resource: str) -> None:
        self.site_id = site_id
        self.resource = resource
        super().__init__(f"A change for {resource!r} on site {site_id} is already in progress")


class ExecutionBackendError(Exception):
    """Raised by execution backend adapters on transport or API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
