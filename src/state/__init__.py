"""
Session state for the Fitcoin link client.

The session holds the identity every remote call is built from (access token,
active user, active link request) plus the cached user info.
"""

from .models import Session

__all__ = ["Session"]
