# bb_core/transactions/api/serializers.py
from rest_framework import serializers

from bb_core.transactions.models import BloodTransaction


class BloodTransactionSerializer(serializers.ModelSerializer):
    performed_by_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = BloodTransaction
        fields = [
            "id",
            "type",
            "blood_group",
            "from_blood_group",
            "to_blood_group",
            "units",
            "previous_stock",
            "new_stock",
            "to_previous_stock",
            "to_new_stock",
            "performed_by_id",
            "performed_by_label",
            "donor_name",
            "donor_phone",
            "donor_email",
            "donor_address",
            "blood_bag_number",
            "receiver_name",
            "receiver_phone",
            "hospital_name",
            "patient_id",
            "needed_date",
            "notes",
            "metadata",
            "status",
            "donation_request_id",
            "blood_request_id",
            "created_at",
        ]
        read_only_fields = fields


class TypeTotalSerializer(serializers.Serializer):
    type = serializers.CharField()
    count = serializers.IntegerField()
    total_units = serializers.IntegerField()


class GroupTotalSerializer(serializers.Serializer):
    blood_group = serializers.CharField()
    entries = serializers.IntegerField()
    donations = serializers.IntegerField()


class TransactionStatsSerializer(serializers.Serializer):
    total_by_type = TypeTotalSerializer(many=True)
    total_by_blood_group = GroupTotalSerializer(many=True)
    recent_transactions = BloodTransactionSerializer(many=True)
