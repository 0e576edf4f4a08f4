# users/urls.py

from django.urls import path

from .views import DeliveryAddressListView, MeView, RegisterView

app_name = "users"

urlpatterns = [
    # ---------------- PUBLIC AUTH ----------------
    path("register/", RegisterView.as_view(), name="register"),
    # ---------------- AUTHENTICATED ----------------
    path("me/", MeView.as_view(), name="me"),
    path("addresses/", DeliveryAddressListView.as_view(), name="addresses"),
]
