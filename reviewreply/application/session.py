"""
Session Coordinator - Connected Business Profile
================================================

Owns the BusinessProfile of the current session and tells interested
components when a business connects or disconnects. The profile survives
restarts through the ProfileRepository (optional).
"""

import logging
from typing import Callable, List, Optional

from ..domain import BusinessProfile, InvalidState
from ..infrastructure.persistence import ProfileRepository

logger = logging.getLogger(__name__)


class SessionCoordinator:
    """
    USAGE:
        session = SessionCoordinator(ProfileRepository())
        session.on_disconnected(store.clear)
        session.restore()
        if session.is_connected:
            await store.load(session.profile)
    """

    def __init__(self, repository: Optional[ProfileRepository] = None):
        self._repository = repository
        self._profile: Optional[BusinessProfile] = None
        self._connected_listeners: List[Callable[[BusinessProfile], None]] = []
        self._disconnected_listeners: List[Callable[[], None]] = []

    @property
    def repository(self) -> Optional[ProfileRepository]:
        return self._repository

    @property
    def profile(self) -> Optional[BusinessProfile]:
        return self._profile

    @property
    def is_connected(self) -> bool:
        return self._profile is not None and self._profile.is_connected

    def require_profile(self) -> BusinessProfile:
        if not self.is_connected:
            raise InvalidState("No business profile connected")
        return self._profile

    def on_connected(self, listener: Callable[[BusinessProfile], None]) -> None:
        self._connected_listeners.append(listener)

    def on_disconnected(self, listener: Callable[[], None]) -> None:
        self._disconnected_listeners.append(listener)

    def restore(self) -> Optional[BusinessProfile]:
        """Reconnect the profile saved by a previous session, if any."""
        if not self._repository:
            return None
        profile = self._repository.load_profile()
        if profile:
            logger.info(f"Restored saved profile: {profile.name}")
            self._set_connected(profile)
        return profile

    def connect(self, profile: BusinessProfile) -> None:
        if self._repository:
            self._repository.save_profile(profile)
        self._set_connected(profile)
        logger.info(f"Connected business: {profile.name} ({profile.location_id})")

    def update_details(self, business_type: Optional[str] = None, signature: Optional[str] = None) -> BusinessProfile:
        """Change the prompt context of the connected profile."""
        current = self.require_profile()
        profile = BusinessProfile(
            name=current.name,
            account_id=current.account_id,
            location_id=current.location_id,
            access_token=current.access_token,
            is_connected=True,
            business_type=business_type,
            signature=signature,
        )
        if self._repository:
            self._repository.save_profile(profile)
        self._profile = profile
        return profile

    def disconnect(self) -> None:
        if self._repository:
            self._repository.delete_profile()
        self._profile = None
        logger.info("Business disconnected")
        for listener in self._disconnected_listeners:
            listener()

    def _set_connected(self, profile: BusinessProfile) -> None:
        self._profile = profile
        for listener in self._connected_listeners:
            listener(profile)
