from __future__ import annotations


class FitcoinError(RuntimeError):
    """Base error for Fitcoin client misuse detected before any request is sent."""


class MissingCredentialError(FitcoinError):
    """The session has no access token; no remote call can be made."""

    def __init__(self) -> None:
        super().__init__("access_token is not set on the session")


class MissingUserIdError(FitcoinError):
    """A user-scoped call was made without an active user id."""

    def __init__(self) -> None:
        super().__init__("user_id is not set on the session")


class NoActiveLinkRequestError(FitcoinError):
    """A link-request-scoped call was made without an active link request."""

    def __init__(self) -> None:
        super().__init__("no active link request; call create_link_request() first")


class MonitorAlreadyRunningError(FitcoinError):
    """The session is already being monitored; stop it before starting another."""

    def __init__(self) -> None:
        super().__init__("link request monitor is already running for this session")


__all__ = [
    "FitcoinError",
    "MissingCredentialError",
    "MissingUserIdError",
    "MonitorAlreadyRunningError",
    "NoActiveLinkRequestError",
]
