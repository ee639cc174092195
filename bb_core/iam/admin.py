# bb_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from bb_core.iam.models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "user",
        "blood_group",
        "district",
        "blood_given",
        "blood_taken",
        "last_donate_date",
        "available",
    )
    list_filter = ("blood_group", "available", "district")
    search_fields = ("user__username", "user__email", "phone")
    readonly_fields = ("blood_given", "blood_taken", "created_at", "updated_at")
    ordering = ("-created_at",)
    list_select_related = ("user",)
