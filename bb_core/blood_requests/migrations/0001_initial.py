from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import uuid


BLOOD_GROUP_CHOICES = [
    ("A+", "A+"),
    ("A-", "A-"),
    ("B+", "B+"),
    ("B-", "B-"),
    ("AB+", "AB+"),
    ("AB-", "AB-"),
    ("O+", "O+"),
    ("O-", "O-"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="BloodRequest",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("requester_name", models.CharField(blank=True, max_length=255)),
                ("requester_email", models.CharField(blank=True, db_index=True, max_length=255)),
                ("blood_group", models.CharField(choices=BLOOD_GROUP_CHOICES, db_index=True, max_length=3)),
                ("units_required", models.PositiveIntegerField(default=1)),
                ("hospital_name", models.CharField(max_length=255)),
                ("hospital_location", models.CharField(max_length=255)),
                ("district", models.CharField(db_index=True, max_length=128)),
                ("contact_number", models.CharField(max_length=32)),
                ("reason", models.TextField()),
                (
                    "urgency",
                    models.CharField(
                        choices=[("normal", "Normal"), ("urgent", "Urgent"), ("emergency", "Emergency")],
                        default="normal",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("active", "Active"),
                            ("fulfilled", "Fulfilled"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "approval_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("rejection_reason", models.TextField(blank=True)),
                ("reviewed_by", models.CharField(blank=True, max_length=255)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("donor_name", models.CharField(blank=True, max_length=255)),
                ("donor_phone", models.CharField(blank=True, max_length=32)),
                ("fulfilled_by", models.CharField(blank=True, max_length=255)),
                ("fulfilled_at", models.DateTimeField(blank=True, null=True)),
                ("transaction_id", models.UUIDField(blank=True, null=True)),
                ("counters_updated", models.BooleanField(default=False)),
                (
                    "requested_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="blood_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "donor_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="pledged_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "blood_requests_blood_request",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["approval_status", "status", "created_at"], name="req_visibility_idx"),
                    models.Index(fields=["blood_group", "district"], name="req_group_district_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(units_required__gte=1), name="ck_request_units_positive"),
                ],
            },
        ),
    ]
