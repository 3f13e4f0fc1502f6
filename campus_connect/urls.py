import os
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path("admin-panel/", admin.site.urls, name="admin"),
    # Token issuing only; registration and OTP flows live outside this service
    path("api/v1/auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path(
        "api/v1/auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"
    ),
    path("api/v1/", include("apps.users.urls")),
    path("api/v1/", include("apps.listings.urls")),
    path("api/v1/", include("apps.messaging.urls")),
    path("api/v1/", include("apps.complaints.urls")),
    path("api/v1/", include("apps.adminpanel.urls")),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
]

if os.environ.get("DEBUG") == "True":
    urlpatterns += [
        path(
            "api/schema/swagger-ui/",
            SpectacularSwaggerView.as_view(url_name="schema"),
            name="swagger-ui",
        ),
    ] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
