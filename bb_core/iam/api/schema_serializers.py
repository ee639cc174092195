# bb_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class MeUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField(allow_null=True, required=False)
    email = serializers.EmailField(allow_null=True, required=False, allow_blank=True)
    is_admin = serializers.BooleanField()
    roles = serializers.ListField(child=serializers.CharField())


class DonorProfileSerializer(serializers.Serializer):
    phone = serializers.CharField(allow_blank=True)
    blood_group = serializers.CharField(allow_blank=True)
    district = serializers.CharField(allow_blank=True)
    blood_given = serializers.IntegerField()
    blood_taken = serializers.IntegerField()
    last_donate_date = serializers.DateField(allow_null=True)
    available = serializers.BooleanField()


class MeResponseSerializer(serializers.Serializer):
    user = MeUserSerializer()
    profile = DonorProfileSerializer(allow_null=True)
