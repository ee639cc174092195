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
            name="BloodTransaction",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("entry", "Entry"),
                            ("donate", "Donate"),
                            ("exchange", "Exchange"),
                            ("disposal", "Disposal"),
                        ],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                ("blood_group", models.CharField(blank=True, choices=BLOOD_GROUP_CHOICES, db_index=True, max_length=3)),
                ("from_blood_group", models.CharField(blank=True, choices=BLOOD_GROUP_CHOICES, max_length=3)),
                ("to_blood_group", models.CharField(blank=True, choices=BLOOD_GROUP_CHOICES, max_length=3)),
                ("units", models.PositiveIntegerField()),
                ("previous_stock", models.IntegerField()),
                ("new_stock", models.IntegerField()),
                ("to_previous_stock", models.IntegerField(blank=True, null=True)),
                ("to_new_stock", models.IntegerField(blank=True, null=True)),
                ("performed_by_label", models.CharField(default="system", max_length=255)),
                ("donor_name", models.CharField(blank=True, max_length=255)),
                ("donor_phone", models.CharField(blank=True, max_length=32)),
                ("donor_email", models.CharField(blank=True, max_length=255)),
                ("donor_address", models.CharField(blank=True, max_length=512)),
                ("blood_bag_number", models.CharField(blank=True, max_length=64)),
                ("receiver_name", models.CharField(blank=True, max_length=255)),
                ("receiver_phone", models.CharField(blank=True, max_length=32)),
                ("hospital_name", models.CharField(blank=True, max_length=255)),
                ("patient_id", models.CharField(blank=True, max_length=64)),
                ("needed_date", models.DateField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("status", models.CharField(default="completed", max_length=16)),
                ("donation_request_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("blood_request_id", models.UUIDField(blank=True, db_index=True, null=True)),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="blood_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "transactions_blood_transaction",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["type", "created_at"], name="tx_type_created_idx"),
                    models.Index(fields=["blood_group", "created_at"], name="tx_group_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(units__gt=0), name="ck_tx_units_positive"),
                ],
            },
        ),
    ]
