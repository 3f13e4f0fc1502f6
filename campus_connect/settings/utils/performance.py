# ----------------------------------------------------------------------------------
# Performance API prefixes for logging
# -----------------------------------------------------------------------------------
PERFORMANCE_API_PREFIXES = {
    # key = prefix to match in request.path
    # value = “short name” used to build logger name as "{short_name}_performance"
    "/api/v1/listings": "listing",
    "/api/v1/messages": "messaging",
    "/api/v1/complaints": "complaint",
    "/api/v1/admin": "adminpanel",
    "/api/v1/users": "users",
}

SLOW_REQUEST_THRESHOLD_SEC = 2  # log any request taking longer than 2 seconds
