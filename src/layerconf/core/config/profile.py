"""Profile-suffixed read path over a KeyValueStore."""

from __future__ import annotations

from typing import Optional

from .keys import ENVIRONMENT_PROPERTY, PROFILE_KEYS, PROFILE_PROPERTY
from .store import KeyValueStore


class ProfileOverlay:
    """
    Gives ``key.<profile>`` first-lookup priority over ``key``.

    The active profile is read from the store by ``refresh_profile()``, which
    callers run after every batch of writes. Writes never go through here.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.profile: Optional[str] = None

    def refresh_profile(self) -> Optional[str]:
        value = self.store.get(PROFILE_PROPERTY) or self.store.get(ENVIRONMENT_PROPERTY)
        self.profile = value or None
        return self.profile

    def use_profile_key(self, key: str) -> bool:
        return self.profile is not None and key not in PROFILE_KEYS

    def profile_key(self, key: str) -> str:
        return f"{key}.{self.profile}"

    def effective_key(self, key: str) -> str:
        """The key a read of ``key`` is answered from."""
        if self.use_profile_key(key):
            suffixed = self.profile_key(key)
            if suffixed in self.store:
                return suffixed
        return key

    def read(self, key: str) -> Optional[str]:
        return self.store.get(self.effective_key(key))

    def contains(self, key: str) -> bool:
        return self.effective_key(key) in self.store

    def is_truthy(self, key: str) -> bool:
        return self.store.is_truthy(self.effective_key(key))
