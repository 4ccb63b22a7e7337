from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import httpx

from common.config import ClientSettings
from common.envelope import (
    SUCCESS_STATUS,
    LinkRequestStatus,
    UserInfo,
    decode_response,
)
from common.http import HttpPipeline, TransportFailure
from common.result import Failure, Result, Success
from state.models import Session

from .errors import MissingCredentialError, MissingUserIdError, NoActiveLinkRequestError
from .monitor import ErrorCallback, LinkRequestMonitor, SleepFn, StatusCallback


CREATE_PATH = "/service/link/create"
QR_PATH = "/service/link/qr"
STATUS_PATH = "/service/link/status"
CLEAR_PATH = "/service/link/clear"
USER_INFO_PATH = "/service/user_info"
PURCHASE_PATH = "/service/purchase"

UserInfoListener = Callable[[Optional[UserInfo]], Any]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QRCode:
    """Raw QR code image for a link request, as served (typically PNG)."""

    content: bytes
    media_type: Optional[str] = None


class FitcoinService:
    """
    Link request lifecycle and account operations for one session.

    Notes
    - Every operation reads its identity from `session` and checks it before
      touching the network, raising `MissingCredentialError`,
      `MissingUserIdError` or `NoActiveLinkRequestError` on misuse.
    - Everything after that is reported through the returned `Result`:
      `Success(value)` for HTTP 200, `Failure(message, status_code)` otherwise,
      with `status_code=None` for transport failures.
    - Operations write back into the shared session. Overlapping calls
      (e.g. a user info fetch racing a monitor tick) are last-write-wins.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        *,
        settings: Optional[ClientSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.session = session if session is not None else Session()
        self._settings = settings or ClientSettings()
        self._base_url = self._settings.base_url.rstrip("/")
        self._http = HttpPipeline(timeout=self._settings.timeout, client=client)
        self._monitor = LinkRequestMonitor(self.session, self.query_link_request_status, sleep=sleep)
        self._user_info_listeners: List[UserInfoListener] = []

    @classmethod
    def from_env(cls, **kwargs: Any) -> "FitcoinService":
        return cls(Session.from_env(), settings=ClientSettings.from_env(), **kwargs)

    async def aclose(self) -> None:
        self.stop_monitoring()
        await self._http.aclose()

    async def __aenter__(self) -> "FitcoinService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def monitoring(self) -> bool:
        return self.session.is_monitoring

    @property
    def monitor_task(self) -> Optional[asyncio.Task]:
        return self._monitor.task

    # --------------- Link requests ---------------
    async def create_link_request(self) -> Result[Optional[str]]:
        """
        Ask the service for a new link request and make it the active one.

        Any previously stored id is dropped first, so a failure (HTTP or
        transport) leaves the session with no active link request.
        """
        token = self._require_token()
        outcome = await self._http.post(self._url(CREATE_PATH), form={"access_token": token})

        self.session.clear_link_request()
        if isinstance(outcome, TransportFailure):
            return Failure(outcome.message)

        result = decode_response(outcome.status_code, outcome.text, str)
        if isinstance(result, Success):
            self.session.link_request_id = result.value
            logger.info("Created link request %s", result.value)
        else:
            logger.info("Link request creation failed (HTTP %s): %s", result.status_code, result.message)
        return result

    async def fetch_qr_code(self) -> Result[QRCode]:
        """Fetch the QR code image for the active link request."""
        self._require_token()
        link_id = self._require_link_request()
        outcome = await self._http.get_binary(self._url(QR_PATH), params={"link_request_id": link_id})

        if isinstance(outcome, TransportFailure):
            return Failure(outcome.message)
        if outcome.status_code != SUCCESS_STATUS:
            # Body is not an envelope on this endpoint; report the status only
            return Failure(f"Error code {outcome.status_code}", status_code=outcome.status_code)
        return Success(QRCode(content=outcome.content, media_type=outcome.media_type))

    async def query_link_request_status(self) -> Result[Optional[LinkRequestStatus]]:
        """
        Fetch the active link request's status.

        Never changes `session.link_request_id`: pending and denied are normal
        answers, not reasons to forget the request.
        """
        self._require_token()
        link_id = self._require_link_request()
        outcome = await self._http.get(self._url(STATUS_PATH), params={"link_request_id": link_id})

        if isinstance(outcome, TransportFailure):
            return Failure(outcome.message)
        return decode_response(outcome.status_code, outcome.text, LinkRequestStatus)

    async def delete_link_request(self) -> Result[None]:
        """
        Clear the active link request on the server.

        Once a response arrives the local id is dropped whatever the status,
        so a rejected delete also forgets the request. A transport failure
        (no response) keeps it.
        """
        self._require_token()
        link_id = self._require_link_request()
        outcome = await self._http.post(self._url(CLEAR_PATH), params={"link_request_id": link_id})

        if isinstance(outcome, TransportFailure):
            return Failure(outcome.message)

        self.session.clear_link_request()
        result = decode_response(outcome.status_code, outcome.text, Any)
        if isinstance(result, Failure):
            logger.info("Link request %s delete rejected (HTTP %s): %s", link_id, result.status_code, result.message)
            return result
        logger.info("Deleted link request %s", link_id)
        return Success(None)

    # --------------- Polling ---------------
    def monitor(
        self,
        interval: Optional[float] = None,
        on_error: Optional[ErrorCallback] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> asyncio.Task:
        """
        Start polling the active link request's status every `interval` seconds.

        Each poll reports through `on_status` or `on_error`. Polling continues
        through approved/denied answers and errors until `stop_monitoring()`.
        Must be called from a running event loop.
        """
        self._require_token()
        self._require_link_request()
        return self._monitor.start(
            interval if interval is not None else self._settings.poll_interval,
            on_error=on_error,
            on_status=on_status,
        )

    def stop_monitoring(self) -> None:
        self._monitor.stop()

    # --------------- Users ---------------
    def subscribe_user_info(self, listener: UserInfoListener) -> None:
        """Register `listener` to receive the new cached user info after every fetch."""
        self._user_info_listeners.append(listener)

    def unsubscribe_user_info(self, listener: UserInfoListener) -> None:
        try:
            self._user_info_listeners.remove(listener)
        except ValueError:
            pass

    async def fetch_user_info(self) -> Result[Optional[UserInfo]]:
        """
        Fetch the active user's info and cache it on the session.

        Any failure clears the cache. Listeners are notified exactly once per
        call, after the cache is updated, with the cached value.
        """
        token = self._require_token()
        user_id = self._require_user_id()
        outcome = await self._http.get(
            self._url(USER_INFO_PATH),
            params={"access_token": token, "user_id": user_id},
        )

        result: Result[Optional[UserInfo]]
        if isinstance(outcome, TransportFailure):
            result = Failure(outcome.message)
        else:
            result = decode_response(outcome.status_code, outcome.text, UserInfo)

        self.session.user_info = result.value if isinstance(result, Success) else None
        self._notify_user_info(self.session.user_info)
        return result

    async def update_user_info(self) -> None:
        """Refresh the cached user info, ignoring the outcome."""
        await self.fetch_user_info()

    async def make_purchase(self, amount: int) -> Result[int]:
        """
        Charge `amount` to the active user and return the new balance.

        The amount is forwarded as-is; validating it is the server's job.
        A 200 reply without a usable balance yields 0. The cached user info
        is left alone.
        """
        token = self._require_token()
        user_id = self._require_user_id()
        outcome = await self._http.post(
            self._url(PURCHASE_PATH),
            params={"access_token": token, "user_id": user_id, "amount": amount},
        )

        if isinstance(outcome, TransportFailure):
            return Failure(outcome.message)
        result = decode_response(outcome.status_code, outcome.text, int)
        if isinstance(result, Failure):
            return result
        return Success(result.value if result.value is not None else 0)

    # --------------- Internal ---------------
    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _require_token(self) -> str:
        if self.session.access_token is None:
            raise MissingCredentialError()
        return self.session.access_token

    def _require_user_id(self) -> str:
        if self.session.user_id is None:
            raise MissingUserIdError()
        return self.session.user_id

    def _require_link_request(self) -> str:
        if self.session.link_request_id is None:
            raise NoActiveLinkRequestError()
        return self.session.link_request_id

    def _notify_user_info(self, info: Optional[UserInfo]) -> None:
        for listener in list(self._user_info_listeners):
            try:
                listener(info)
            except Exception:
                logger.exception("User info listener raised")


__all__ = [
    "FitcoinService",
    "QRCode",
]
