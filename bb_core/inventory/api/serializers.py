# bb_core/inventory/api/serializers.py
from rest_framework import serializers

from bb_core.inventory.models import BloodStock, DonationHistory


def _text(**kwargs):
    return serializers.CharField(required=False, allow_blank=True, default="", **kwargs)


class BloodStockSerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = BloodStock
        fields = ["blood_group", "units", "last_updated", "updated_by", "low_stock_threshold", "is_low_stock"]
        read_only_fields = fields


class StockByGroupSerializer(serializers.Serializer):
    blood_group = serializers.CharField()
    units = serializers.IntegerField()
    last_updated = serializers.DateTimeField(allow_null=True)
    updated_by = serializers.CharField(allow_null=True)


class DonationHistorySerializer(serializers.ModelSerializer):
    donor_user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = DonationHistory
        fields = [
            "id",
            "blood_bag_number",
            "blood_group",
            "units",
            "donor_name",
            "donor_phone",
            "donor_address",
            "donor_user_id",
            "is_registered_user",
            "donation_request_id",
            "transaction_id",
            "donation_date",
            "approved_by",
            "status",
            "notes",
            "blood_used",
            "used_for_patient_name",
            "used_for_patient_id",
            "used_for_hospital_name",
            "used_for_doctor_name",
            "used_at",
            "used_by",
            "used_notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# -------------------------
# Inputs (required-field rules live in StockService)
# -------------------------
class BloodEntryInputSerializer(serializers.Serializer):
    blood_group = _text()
    units = serializers.IntegerField(required=False, allow_null=True, default=None)
    donor_name = _text()
    donor_phone = _text()
    donor_address = _text()
    donor_email = _text()
    blood_bag_number = _text()
    notes = _text()

    # Biographical extras kept on the transaction record
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    weight = serializers.FloatField(required=False, allow_null=True)
    district = _text()
    last_donation_date = serializers.DateField(required=False, allow_null=True)
    medical_conditions = _text()
    availability = _text()

    EXTRA_FIELDS = ("date_of_birth", "weight", "district", "last_donation_date", "medical_conditions", "availability")


class BloodDonateInputSerializer(serializers.Serializer):
    blood_group = _text()
    units = serializers.IntegerField(required=False, allow_null=True, default=None)
    receiver_name = _text()
    receiver_phone = _text()
    hospital_name = _text()
    patient_id = _text()
    needed_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = _text()


class BloodExchangeInputSerializer(serializers.Serializer):
    from_blood_group = _text()
    to_blood_group = _text()
    units = serializers.IntegerField(required=False, allow_null=True, default=None)
    hospital_name = _text()
    patient_id = _text()
    needed_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = _text()


class BloodDisposalInputSerializer(serializers.Serializer):
    blood_group = _text()
    units = serializers.IntegerField(required=False, allow_null=True, default=None)
    reason = _text()
    notes = _text()


class MarkBagUsedInputSerializer(serializers.Serializer):
    blood_bag_number = _text()
    patient_name = _text()
    patient_id = _text()
    hospital_name = _text()
    doctor_name = _text()
    used_at = serializers.DateTimeField(required=False, allow_null=True, default=None)
    used_by = _text()
    notes = _text()


class StockOperationResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    transaction_id = serializers.UUIDField()
    previous_stock = serializers.IntegerField()
    new_stock = serializers.IntegerField()
    to_previous_stock = serializers.IntegerField(required=False)
    to_new_stock = serializers.IntegerField(required=False)
    blood_bag_number = serializers.CharField(required=False)
