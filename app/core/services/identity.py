"""
Purpose: Identity provider adapters. The rest of the app only sees
UserProfile / AuthStatus and sign_in / sign_out.

- StreamlitIdentityProvider: Streamlit's built-in OIDC flow (st.login,
  st.user, st.logout). Needs Authlib and an [auth] block in secrets.toml.
- LocalIdentityProvider: one fixed profile, for local runs without OAuth.

Testing: patch the module-level `st` with a mock.
"""

from __future__ import annotations
from typing import Optional

import streamlit as st

from ..logging_utils import get_logger
from ..models import AuthStatus, UserProfile

logger = get_logger(__name__)


class StreamlitIdentityProvider:
    def __init__(self, provider: Optional[str] = None) -> None:
        self.provider = provider

    def status(self) -> AuthStatus:
        return AuthStatus.SIGNED_IN if st.user.is_logged_in else AuthStatus.SIGNED_OUT

    def current_user(self) -> Optional[UserProfile]:
        if not st.user.is_logged_in:
            return None
        uid = st.user.get("sub") or st.user.get("email")
        if not uid:
            logger.warning("Signed-in user has neither 'sub' nor 'email' claim")
            return None
        return UserProfile(
            uid=str(uid),
            display_name=st.user.get("name"),
            email=st.user.get("email"),
            photo_url=st.user.get("picture"),
        )

    def sign_in(self) -> bool:
        """Start the redirect flow. Returns False if it could not start."""
        try:
            if self.provider:
                st.login(self.provider)
            else:
                st.login()
        except Exception as e:
            logger.error("Error signing in: %s", e)
            return False
        return True

    def sign_out(self) -> None:
        try:
            st.logout()
        except Exception as e:
            logger.error("Error signing out: %s", e)


class LocalIdentityProvider:
    def __init__(self, profile: Optional[UserProfile] = None) -> None:
        self.profile = profile or UserProfile(uid="local", display_name="Local user")
        self._signed_in = False

    def status(self) -> AuthStatus:
        return AuthStatus.SIGNED_IN if self._signed_in else AuthStatus.SIGNED_OUT

    def current_user(self) -> Optional[UserProfile]:
        return self.profile if self._signed_in else None

    def sign_in(self) -> bool:
        self._signed_in = True
        return True

    def sign_out(self) -> None:
        self._signed_in = False
