import logging
import time

from django.core.cache import cache
from rest_framework.throttling import UserRateThrottle

logger = logging.getLogger(__name__)


class BaseCacheThrottle(UserRateThrottle):
    """
    Base cache-based throttle. Subclasses only need to set `scope`.
    """

    def get_cache_key(self, request, view):
        """
        Generates a key like "throttle_{scope}_{user_id_or_ip}".
        """
        if request.user and request.user.is_authenticated:
            user_identifier = str(request.user.id)
        else:
            user_identifier = self.get_ident(request)

        return f"throttle_{self.scope}_{user_identifier}"

    def allow_request(self, request, view):
        if self.rate is None:
            return True

        self.key = self.get_cache_key(request, view)
        if self.key is None:
            return True

        self.now = time.time()
        self.history = cache.get(self.key, [])

        # Drop timestamps outside the window
        while self.history and self.history[-1] <= self.now - self.duration:
            self.history.pop()

        if len(self.history) >= self.num_requests:
            logger.warning(
                f"Rate limit exceeded for {self.scope}: "
                f"key={self.key}, requests={len(self.history)}, "
                f"limit={self.num_requests}, window={self.duration}s"
            )
            return False

        self.history.insert(0, self.now)
        cache.set(self.key, self.history, self.duration)
        return True

    def wait(self):
        """
        Seconds until the oldest request in the window expires.
        """
        if not getattr(self, "history", None):
            return None
        remaining = self.duration - (self.now - self.history[-1])
        return max(remaining, 0)
