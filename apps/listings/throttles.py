from apps.core.throttle import BaseCacheThrottle


class ListingCreateRateThrottle(BaseCacheThrottle):
    scope = "listing_create"


class ListingReviewRateThrottle(BaseCacheThrottle):
    scope = "listing_review"
