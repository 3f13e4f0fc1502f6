# -----------------------------------------------------------------------------
# CENTRALIZED CACHE-KEY TEMPLATES
#
# For each “resource” you want to cache, list every “key name” you might use.
# Use Python‐format placeholders for variable parts.
#
# Usage:
#    CacheKeyManager.make_key("listing", "detail", id=42)
#    → "listing:detail:42"
#
# The code will always prepend Django’s KEY_PREFIX automatically.
# -----------------------------------------------------------------------------
CACHE_KEY_TEMPLATES = {
    "listing": {
        "detail": "listing:detail:{id}",
        "categories": "listing:categories",
        "departments": "listing:departments",
    },
    "listing_purchases": {
        "user": "listing:purchases:{user_id}",
    },
}

CACHE_TTL_SHORT = 60 * 5
CACHE_TTL_MEDIUM = 60 * 30
