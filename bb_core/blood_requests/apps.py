from django.apps import AppConfig


class BloodRequestsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "bb_core.blood_requests"
    label = "blood_requests"
