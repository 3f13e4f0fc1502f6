import logging

from django.conf import settings
from django.core.cache import cache

from .cache_key_manager import CacheKeyManager

logger = logging.getLogger("monitoring")


class CacheManager:
    """
    Centralized invalidation of cache keys per resource,
    fully driven by settings.CACHE_KEY_TEMPLATES.
    """

    @staticmethod
    def invalidate(resource_name: str, **kwargs):
        """
        Invalidate every key of a resource that can be built from ``kwargs``.

        Example:
            CacheManager.invalidate("listing", id=42)
        """
        templates = getattr(settings, "CACHE_KEY_TEMPLATES", {})
        if resource_name not in templates:
            logger.warning(f"No cache templates found for resource '{resource_name}'")
            return

        to_delete = []
        for key_name in templates[resource_name]:
            try:
                to_delete.append(
                    CacheKeyManager.make_key(resource_name, key_name, **kwargs)
                )
            except KeyError:
                # Template needs an argument the caller did not pass
                continue

        if to_delete:
            cache.delete_many(to_delete)
            logger.debug(f"Invalidated cache keys: {to_delete}")
