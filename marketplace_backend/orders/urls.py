# orders/urls.py

from django.urls import path

from orders.views import (
    MyOrdersView,
    OrderDetailView,
    OrderListCreateView,
    OrderStatsView,
    OrderStatusView,
    SellerOrdersView,
)

app_name = "orders"

urlpatterns = [
    path("", OrderListCreateView.as_view(), name="list-create"),
    path("mine/", MyOrdersView.as_view(), name="mine"),
    path("seller/", SellerOrdersView.as_view(), name="seller"),
    path("stats/", OrderStatsView.as_view(), name="stats"),
    path("<uuid:pk>/", OrderDetailView.as_view(), name="detail"),
    path("<uuid:pk>/status/", OrderStatusView.as_view(), name="status"),
]
