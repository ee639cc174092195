from rest_framework import serializers

from bb_core.donations.models import DonationRequest


def _text(**kwargs):
    return serializers.CharField(required=False, allow_blank=True, default="", **kwargs)


class DonationRequestSerializer(serializers.ModelSerializer):
    donor_user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = DonationRequest
        fields = [
            "id",
            "donor_name",
            "donor_phone",
            "donor_email",
            "donor_address",
            "donor_user_id",
            "date_of_birth",
            "weight",
            "district",
            "last_donation_date",
            "medical_conditions",
            "availability",
            "notes",
            "blood_group",
            "units",
            "approval_status",
            "status",
            "eligibility",
            "blood_bag_number",
            "transaction_id",
            "approved_by",
            "approved_at",
            "added_to_stock_at",
            "rejection_reason",
            "rejected_by",
            "rejected_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DonationRequestCreateSerializer(serializers.Serializer):
    """
    Dates and weight stay as raw text: the eligibility rules report bad
    values as ineligibility reasons rather than field errors.
    """
    blood_group = _text()
    units = serializers.IntegerField(required=False, allow_null=True, default=None, min_value=1)
    donor_name = _text()
    donor_phone = _text()
    donor_email = _text()
    donor_address = _text()
    date_of_birth = _text()
    weight = _text()
    district = _text()
    last_donation_date = _text()
    medical_conditions = _text()
    availability = _text()
    notes = _text()


class DonationApproveSerializer(serializers.Serializer):
    blood_bag_number = _text()


class DonationRejectSerializer(serializers.Serializer):
    reason = _text()


class DonationApprovalResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    transaction_id = serializers.UUIDField()
    previous_stock = serializers.IntegerField()
    new_stock = serializers.IntegerField()
    history_recorded = serializers.BooleanField()
    data = DonationRequestSerializer()
