"""
Profile Cache - time-boxed cache of the signed-in user's profile.

A cached profile is served without any I/O while it is younger than the TTL
(5 minutes by default). Every local mutation goes through apply_local_patch,
which edits the cached payload in place and restamps it, so all mutation
helpers share one invalidation rule. invalidate() drops everything (logout,
401 responses).
"""

import copy
import logging
import time
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


class ProfileCache:
    """
    Cache around a profile fetcher.

    Args:
        fetch_profile: callable returning the profile payload (does the I/O)
        ttl_seconds: how long a fetched or patched profile stays servable
        clock: seconds-returning clock, injectable for tests
    """

    def __init__(
        self,
        fetch_profile: Callable[[], Dict[str, Any]],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch_profile = fetch_profile
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._profile: Optional[Dict[str, Any]] = None
        self._last_fetched: Optional[float] = None

    @property
    def profile(self) -> Optional[Dict[str, Any]]:
        return self._profile

    @property
    def last_fetched(self) -> Optional[float]:
        return self._last_fetched

    def is_fresh(self) -> bool:
        if self._profile is None or self._last_fetched is None:
            return False
        return self._clock() - self._last_fetched < self.ttl_seconds

    def get_profile(self, force_refresh: bool = False) -> Dict[str, Any]:
        """
        Return a copy of the profile, fetching only when forced, empty or expired.

        Edits to the returned dict do not reach the cache; use the patch
        helpers for that. A failed fetch re-raises and leaves the previous
        entry untouched.
        """
        if force_refresh or not self.is_fresh():
            self._profile = self._fetch_profile()
            self._last_fetched = self._clock()
            logger.debug("Profile fetched and cached")
        return copy.deepcopy(self._profile)

    def invalidate(self) -> None:
        self._profile = None
        self._last_fetched = None

    def apply_local_patch(self, patch: Callable[[Dict[str, Any]], None]) -> bool:
        """
        Apply patch to the cached profile and restamp it.

        Nothing is cached -> nothing to patch; the next get_profile fetches.
        Returns True if a patch was applied.
        """
        if self._profile is None:
            return False
        patch(self._profile)
        self._last_fetched = self._clock()
        return True

    # Collection helpers, all routed through apply_local_patch

    def merge_fields(self, fields: Dict[str, Any]) -> bool:
        return self.apply_local_patch(lambda profile: profile.update(copy.deepcopy(fields)))

    def append_item(self, collection: str, item: Dict[str, Any]) -> bool:
        def patch(profile):
            profile.setdefault(collection, []).append(copy.deepcopy(item))
        return self.apply_local_patch(patch)

    def replace_item(self, collection: str, id_key: str, item: Dict[str, Any]) -> bool:
        def patch(profile):
            profile[collection] = [
                {**existing, **item} if existing.get(id_key) == item.get(id_key) else existing
                for existing in profile.get(collection, [])
            ]
        return self.apply_local_patch(patch)

    def remove_item(self, collection: str, id_key: str, item_id: Any) -> bool:
        def patch(profile):
            profile[collection] = [
                existing for existing in profile.get(collection, [])
                if existing.get(id_key) != item_id
            ]
        return self.apply_local_patch(patch)
