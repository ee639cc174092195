# bb_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from bb_core.blood_requests.api.views import BloodRequestViewSet
from bb_core.donations.api.views import DonationRequestViewSet
from bb_core.iam.api.auth import LoginView, LogoutView, RefreshView
from bb_core.iam.api.me import MeView
from bb_core.inventory.api.views import (
    AllBloodStockView,
    BloodDisposalView,
    BloodDonateView,
    BloodEntryView,
    BloodExchangeView,
    BloodStockByGroupView,
    BloodStockView,
    DonationHistoryViewSet,
    LowStockView,
)
from bb_core.transactions.api.views import BloodTransactionViewSet

router = DefaultRouter()

router.register(r"blood-requests", BloodRequestViewSet, basename="blood-requests")
router.register(r"donation-requests", DonationRequestViewSet, basename="donation-requests")
router.register(r"admin/blood-transactions", BloodTransactionViewSet, basename="blood-transactions")
router.register(r"admin/donation-history", DonationHistoryViewSet, basename="donation-history")

urlpatterns = [
    # Auth + /me
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    # Direct ledger operations (admin)
    path("admin/blood-entry/", BloodEntryView.as_view(), name="blood-entry"),
    path("admin/blood-donate/", BloodDonateView.as_view(), name="blood-donate"),
    path("admin/blood-exchange/", BloodExchangeView.as_view(), name="blood-exchange"),
    path("admin/blood-disposal/", BloodDisposalView.as_view(), name="blood-disposal"),

    # Stock snapshots
    path("admin/blood-stock/", BloodStockView.as_view(), name="blood-stock"),
    path("admin/blood-stock/by-group/", BloodStockByGroupView.as_view(), name="blood-stock-by-group"),
    path("admin/blood-stock/low/", LowStockView.as_view(), name="blood-stock-low"),
    path("admin/all-blood-stock/", AllBloodStockView.as_view(), name="all-blood-stock"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
