from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import uuid

import bb_core.inventory.models


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
            name="BloodStock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("blood_group", models.CharField(choices=BLOOD_GROUP_CHOICES, max_length=3, unique=True)),
                ("units", models.IntegerField(default=0)),
                ("last_updated", models.DateTimeField(auto_now=True)),
                ("updated_by", models.CharField(default="system", max_length=255)),
                (
                    "low_stock_threshold",
                    models.PositiveIntegerField(default=bb_core.inventory.models.default_low_stock_threshold),
                ),
            ],
            options={
                "db_table": "inventory_blood_stock",
                "ordering": ["blood_group"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(units__gte=0), name="ck_stock_units_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DonationHistory",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("blood_bag_number", models.CharField(max_length=64, unique=True)),
                ("blood_group", models.CharField(choices=BLOOD_GROUP_CHOICES, db_index=True, max_length=3)),
                ("units", models.PositiveIntegerField(default=1)),
                ("donor_name", models.CharField(blank=True, max_length=255)),
                ("donor_phone", models.CharField(blank=True, max_length=32)),
                ("donor_address", models.CharField(blank=True, max_length=512)),
                ("is_registered_user", models.BooleanField(default=False)),
                ("donation_request_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("transaction_id", models.UUIDField(blank=True, null=True)),
                ("donation_date", models.DateTimeField()),
                ("approved_by", models.CharField(blank=True, max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[("available", "Available"), ("used", "Used")],
                        db_index=True,
                        default="available",
                        max_length=16,
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("blood_used", models.BooleanField(db_index=True, default=False)),
                ("used_for_patient_name", models.CharField(blank=True, max_length=255)),
                ("used_for_patient_id", models.CharField(blank=True, max_length=64)),
                ("used_for_hospital_name", models.CharField(blank=True, max_length=255)),
                ("used_for_doctor_name", models.CharField(blank=True, max_length=255)),
                ("used_at", models.DateTimeField(blank=True, null=True)),
                ("used_by", models.CharField(blank=True, max_length=255)),
                ("used_notes", models.TextField(blank=True)),
                (
                    "donor_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="donated_bags",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "inventory_donation_history",
                "ordering": ["-donation_date"],
                "indexes": [
                    models.Index(fields=["blood_group", "blood_used"], name="inv_bag_group_used_idx"),
                ],
            },
        ),
    ]
