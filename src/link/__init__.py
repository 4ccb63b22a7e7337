"""
Fitcoin link request lifecycle.

Modules:
- service: FitcoinService (create/query/delete link requests, user info, purchases)
- monitor: LinkRequestMonitor (cancellable periodic status polling)
- errors: precondition errors raised before any request is sent
"""

from .errors import (
    FitcoinError,
    MissingCredentialError,
    MissingUserIdError,
    MonitorAlreadyRunningError,
    NoActiveLinkRequestError,
)
from .monitor import LinkRequestMonitor
from .service import FitcoinService, QRCode

__all__ = [
    "FitcoinError",
    "FitcoinService",
    "LinkRequestMonitor",
    "MissingCredentialError",
    "MissingUserIdError",
    "MonitorAlreadyRunningError",
    "NoActiveLinkRequestError",
    "QRCode",
]
