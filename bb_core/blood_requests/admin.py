from django.contrib import admin

from bb_core.blood_requests.models import BloodRequest


@admin.register(BloodRequest)
class BloodRequestAdmin(admin.ModelAdmin):
    list_display = (
        "blood_group",
        "units_required",
        "hospital_name",
        "district",
        "urgency",
        "status",
        "approval_status",
        "created_at",
    )
    list_filter = ("status", "approval_status", "urgency", "blood_group", "district")
    search_fields = ("requester_name", "requester_email", "hospital_name", "contact_number", "donor_name")
    ordering = ("-created_at",)
    # Lifecycle changes go through BloodRequestService (stock + counters)
    readonly_fields = (
        "status",
        "counters_updated",
        "donor_user",
        "fulfilled_by",
        "fulfilled_at",
        "transaction_id",
        "created_at",
        "updated_at",
    )
