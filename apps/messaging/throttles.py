from apps.core.throttle import BaseCacheThrottle


class ConversationInitiateRateThrottle(BaseCacheThrottle):
    scope = "conversation_initiate"


class MessageSendRateThrottle(BaseCacheThrottle):
    scope = "message_send"


class SaleActionRateThrottle(BaseCacheThrottle):
    scope = "sale_action"


class SellerRatingRateThrottle(BaseCacheThrottle):
    scope = "seller_rating"
