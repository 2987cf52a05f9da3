from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("modules.core.urls")),
    # Domain modules
    path("api/", include("modules.accounts.urls")),
    path("api/", include("modules.products.urls")),
    path("api/", include("modules.orders.urls")),
    # Auth (SimpleJWT)
    path("api/auth/token", TokenObtainPairView.as_view(), name="token_obtain"),
    path(
        "api/auth/token/refresh",
        TokenRefreshView.as_view(),
        name="token_refresh",
    ),
    path(
        "api/auth/token/verify",
        TokenVerifyView.as_view(),
        name="token_verify",
    ),
    # OpenAPI schema & docs (public)
    path("api/schema", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/docs",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    path("api/redoc", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]

# Delivery confirmation photos. Only mounted when DEBUG is on; in production
# MEDIA_URL is served by the reverse proxy or the storage backend.
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
