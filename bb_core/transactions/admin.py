# bb_core/transactions/admin.py
from django.contrib import admin

from bb_core.transactions.models import BloodTransaction


@admin.register(BloodTransaction)
class BloodTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "created_at",
        "type",
        "blood_group",
        "from_blood_group",
        "to_blood_group",
        "units",
        "previous_stock",
        "new_stock",
        "performed_by_label",
    )
    list_filter = ("type", "blood_group", "status")
    search_fields = ("donor_name", "receiver_name", "hospital_name", "blood_bag_number", "patient_id")
    ordering = ("-created_at",)

    # Append-only trail
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
