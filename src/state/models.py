from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field

from common.config import ENV_ACCESS_TOKEN, ENV_USER_ID
from common.envelope import UserInfo


class Session(BaseModel):
    """
    Identity and cached state for one Fitcoin client session.

    Fields
    - access_token: service access credential; every remote call needs it.
    - user_id: the active Fitcoin user; needed by user info and purchases.
    - link_request_id: the active link request; set by create, cleared by
      delete and by a failed create.
    - user_info: outcome of the most recent user info fetch (None after a failure).
    - is_monitoring: True while a link request monitor runs for this session.
    - monitor_generation: identifies the current monitor run. Shared by every
      service on the session so a stopped loop cannot resume beside a new one.

    Notes
    - Fields are plain mutable attributes. Assignments are not validated;
      any string or None is accepted.
    - Sessions are independent objects. Nothing here is process-global.
    """

    access_token: Optional[str] = Field(default=None, description="Service access token")
    user_id: Optional[str] = Field(default=None, description="Active Fitcoin user id")
    link_request_id: Optional[str] = Field(default=None, description="Active link request id")
    user_info: Optional[UserInfo] = Field(
        default=None,
        description="Last fetched user info (None if never fetched or last fetch failed)",
    )
    is_monitoring: bool = Field(default=False, description="True while a monitor is active")
    monitor_generation: int = Field(
        default=0,
        description="Bumped by each monitor start; only the loop holding the latest value may run",
    )

    @classmethod
    def from_env(cls) -> "Session":
        """Build a session from FITCOIN_ACCESS_TOKEN / FITCOIN_USER_ID (both optional)."""
        return cls(
            access_token=os.environ.get(ENV_ACCESS_TOKEN) or None,
            user_id=os.environ.get(ENV_USER_ID) or None,
        )

    def clear_link_request(self) -> None:
        self.link_request_id = None
