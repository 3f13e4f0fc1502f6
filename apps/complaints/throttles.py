from apps.core.throttle import BaseCacheThrottle


class ComplaintCreateRateThrottle(BaseCacheThrottle):
    scope = "complaint_create"
