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
            name="DonationRequest",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("donor_name", models.CharField(max_length=255)),
                ("donor_phone", models.CharField(max_length=32)),
                ("donor_email", models.CharField(blank=True, db_index=True, max_length=255)),
                ("donor_address", models.CharField(blank=True, max_length=512)),
                ("date_of_birth", models.DateField(blank=True, null=True)),
                ("weight", models.PositiveIntegerField(blank=True, null=True)),
                ("district", models.CharField(blank=True, max_length=128)),
                ("last_donation_date", models.DateField(blank=True, null=True)),
                ("medical_conditions", models.CharField(default="None", max_length=512)),
                ("availability", models.CharField(default="Available", max_length=64)),
                ("notes", models.TextField(blank=True)),
                ("blood_group", models.CharField(choices=BLOOD_GROUP_CHOICES, db_index=True, max_length=3)),
                ("units", models.PositiveIntegerField(default=1)),
                (
                    "approval_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed"), ("cancelled", "Cancelled")],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("eligibility", models.JSONField(default=dict)),
                ("blood_bag_number", models.CharField(blank=True, max_length=64)),
                ("transaction_id", models.UUIDField(blank=True, null=True)),
                ("approved_by", models.CharField(blank=True, max_length=255)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("added_to_stock_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("rejected_by", models.CharField(blank=True, max_length=255)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                (
                    "donor_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="donation_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "donations_donation_request",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["approval_status", "created_at"], name="don_approval_created_idx"),
                    models.Index(fields=["blood_group", "district"], name="don_group_district_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(units__gte=1), name="ck_donation_units_positive"),
                ],
            },
        ),
    ]
