from rest_framework import serializers

from bb_core.blood_requests.models import BloodRequest


def _text(**kwargs):
    return serializers.CharField(required=False, allow_blank=True, default="", **kwargs)


class BloodRequestSerializer(serializers.ModelSerializer):
    requested_by_id = serializers.IntegerField(read_only=True)
    donor_user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = BloodRequest
        fields = [
            "id",
            "requester_name",
            "requester_email",
            "requested_by_id",
            "blood_group",
            "units_required",
            "hospital_name",
            "hospital_location",
            "district",
            "contact_number",
            "reason",
            "urgency",
            "status",
            "approval_status",
            "rejection_reason",
            "reviewed_by",
            "reviewed_at",
            "donor_user_id",
            "donor_name",
            "donor_phone",
            "fulfilled_by",
            "fulfilled_at",
            "transaction_id",
            "counters_updated",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# -------------------------
# Inputs (required-field rules live in BloodRequestService)
# -------------------------
class BloodRequestCreateSerializer(serializers.Serializer):
    blood_group = _text()
    units_required = serializers.IntegerField(required=False, allow_null=True, default=None, min_value=1)
    hospital_name = _text()
    hospital_location = _text()
    district = _text()
    contact_number = _text()
    reason = _text()
    urgency = _text()
    requester_name = _text()
    requester_email = _text()


class BloodRequestRejectSerializer(serializers.Serializer):
    reason = _text()


class BloodRequestDonateSerializer(serializers.Serializer):
    donor_name = _text()
    donor_phone = _text()


class DonateFromBankSerializer(serializers.Serializer):
    units = serializers.IntegerField(required=False, allow_null=True, default=None, min_value=1)


class BloodRequestStatusSerializer(serializers.Serializer):
    status = _text()
    fulfilled_by = _text()
    donor_name = _text()
    donor_phone = _text()


class DonateFromBankResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    transaction_id = serializers.UUIDField()
    previous_stock = serializers.IntegerField()
    new_stock = serializers.IntegerField()
    data = BloodRequestSerializer()
