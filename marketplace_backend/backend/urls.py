# backend/urls.py
"""
PROJECT URLS

All API routes live under /api/ and answer with the versioned envelope.

- /api/auth/...      register, me, address book, JWT create/refresh
- /api/products/     public catalog (read-only)
- /api/coupons/      coupon check (public) + coupon management (admin)
- /api/orders/       checkout, order history, fulfilment, stats

Operational:
- /api/health/ (AllowAny) checks DB connectivity.
- Django admin path is configurable via env var (ADMIN_PATH).
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import connections
from django.db.utils import DatabaseError
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from backend.envelope import error_response, success_response


# ------------------ API ROOT (PUBLIC) ------------------
@extend_schema(
    responses={200: {"type": "object"}},
    description="Entry points of the marketplace API",
)
@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def api_root(request):
    return success_response(
        {
            "message": "Marketplace API is running",
            "auth": {
                "register": "/api/auth/register/",
                "me": "/api/auth/me/",
                "addresses": "/api/auth/addresses/",
                "jwt_create": "/api/auth/jwt/create/",
                "jwt_refresh": "/api/auth/jwt/refresh/",
            },
            "docs": {
                "swagger": "/api/docs/",
                "schema": "/api/schema/",
            },
            "modules": {
                "products": "/api/products/",
                "coupons": "/api/coupons/",
                "orders": "/api/orders/",
            },
        }
    )


# ------------------ HEALTH CHECK (PUBLIC) ------------------
@extend_schema(responses={200: {"type": "object"}, 503: {"type": "object"}})
@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """
    Confirms the app is responding and the database answers a trivial query.
    """
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except DatabaseError as e:
        return error_response(
            code="service_unavailable",
            message=f"Database unavailable: {e}",
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return success_response({"status": "ok", "db": "ok"})


# ------------------ ADMIN PATH ------------------
# Keep the trailing slash. In production set ADMIN_PATH to something
# non-obvious and leave it out of public docs.
ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/")
if not ADMIN_PATH.endswith("/"):
    ADMIN_PATH = f"{ADMIN_PATH}/"


# ------------------ API ROUTES (ALL UNDER /api/) ------------------
api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    # OpenAPI / Swagger
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    # JWT (SimpleJWT, email + password)
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    # Accounts
    path("auth/", include("users.urls")),
    # Marketplace
    path("products/", include("products.urls")),
    path("coupons/", include("coupons.urls")),
    path("orders/", include("orders.urls")),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
