# bb_core/inventory/admin.py
from __future__ import annotations

from django.contrib import admin

from bb_core.inventory.models import BloodStock, DonationHistory


@admin.register(BloodStock)
class BloodStockAdmin(admin.ModelAdmin):
    list_display = ("blood_group", "units", "low_stock_threshold", "last_updated", "updated_by")
    ordering = ("blood_group",)
    # Units move only through the ledger
    readonly_fields = ("units", "last_updated", "updated_by")


@admin.register(DonationHistory)
class DonationHistoryAdmin(admin.ModelAdmin):
    list_display = (
        "blood_bag_number",
        "blood_group",
        "units",
        "donor_name",
        "donation_date",
        "status",
        "blood_used",
    )
    list_filter = ("blood_group", "status", "blood_used")
    search_fields = ("blood_bag_number", "donor_name", "donor_phone", "used_for_patient_name")
    readonly_fields = ("donation_request_id", "transaction_id", "created_at", "updated_at")
    ordering = ("-donation_date",)

    fieldsets = (
        ("Bag", {"fields": ("blood_bag_number", "blood_group", "units", "status", "notes")}),
        ("Donor", {"fields": ("donor_name", "donor_phone", "donor_address", "donor_user", "is_registered_user")}),
        ("Source", {"fields": ("donation_request_id", "transaction_id", "donation_date", "approved_by")}),
        (
            "Usage",
            {
                "fields": (
                    "blood_used",
                    "used_for_patient_name",
                    "used_for_patient_id",
                    "used_for_hospital_name",
                    "used_for_doctor_name",
                    "used_at",
                    "used_by",
                    "used_notes",
                )
            },
        ),
        ("Audit", {"fields": ("created_at", "updated_at")}),
    )
