from django.contrib import admin

from bb_core.donations.models import DonationRequest


@admin.register(DonationRequest)
class DonationRequestAdmin(admin.ModelAdmin):
    list_display = ("donor_name", "donor_phone", "blood_group", "units", "approval_status", "status", "created_at")
    list_filter = ("approval_status", "status", "blood_group", "district")
    search_fields = ("donor_name", "donor_phone", "donor_email", "blood_bag_number")
    ordering = ("-created_at",)
    # Approval moves stock; it goes through DonationService, not the admin form
    readonly_fields = (
        "approval_status",
        "status",
        "eligibility",
        "blood_bag_number",
        "transaction_id",
        "approved_by",
        "approved_at",
        "added_to_stock_at",
        "rejection_reason",
        "rejected_by",
        "rejected_at",
        "created_at",
        "updated_at",
    )
