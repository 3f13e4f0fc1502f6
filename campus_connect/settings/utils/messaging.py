# Messaging / negotiation feature settings
MESSAGING_SETTINGS = {
    # Message templates written by the conversation engine
    "GREETING_TEMPLATE": "Hi! I'm interested in your listing. Is it still available?",
    "SALE_REQUEST_TEMPLATE": (
        "{seller_name} wants to complete the sale. "
        "Please confirm to finalize the purchase."
    ),
    "SALE_CONFIRMED_TEMPLATE": "{buyer_name} confirmed the purchase. Sale completed!",
    "SALE_REJECTED_TEMPLATE": (
        'Sorry, this item "{listing_title}" has been sold to another buyer. '
        "Your request has been rejected."
    ),
    "DEFAULT_SELLER_NAME": "Seller",
    "DEFAULT_BUYER_NAME": "Buyer",
    "DEFAULT_INITIATOR_NAME": "A student",
    # Rating bounds
    "MIN_RATING": 1,
    "MAX_RATING": 5,
    # Reconciliation of competing conversations after a confirmed sale
    "RECONCILE_INTERVAL_MINUTES": 15,
}

# Notification delivery
NOTIFICATION_SETTINGS = {
    "MAX_DELIVERY_ATTEMPTS": 3,
    "RETRY_COUNTDOWN_SECONDS": 60,
}
