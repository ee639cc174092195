from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from bb_core.common.api.pagination import paginate
from bb_core.common.permissions import DonationRequestPermission
from bb_core.donations.api.serializers import (
    DonationApprovalResponseSerializer,
    DonationApproveSerializer,
    DonationRejectSerializer,
    DonationRequestCreateSerializer,
    DonationRequestSerializer,
)
from bb_core.donations.models import DonationRequest
from bb_core.donations.selectors import DonationSelector
from bb_core.donations.services import DonationService


class DonationRequestViewSet(viewsets.GenericViewSet):
    """
    Donor submissions (public) and the admin review queue.
    """
    permission_classes = [DonationRequestPermission]

    serializer_class = DonationRequestSerializer
    queryset = DonationRequest.objects.none()

    def _get(self, pk) -> DonationRequest:
        try:
            return DonationSelector.get(donation_id=pk)
        except DonationSelector.NotFound:
            raise NotFound("Donation request not found")

    @extend_schema(
        tags=["Donations"],
        parameters=[
            OpenApiParameter(name="blood_group", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="district", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="approval_status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                             description="pending | approved | rejected"),
            OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                             description="pending | completed | cancelled"),
        ],
    )
    def list(self, request):
        return paginate(request, DonationSelector.list_requests(params=request.query_params), DonationRequestSerializer)

    @extend_schema(tags=["Donations"], responses={200: DonationRequestSerializer})
    def retrieve(self, request, pk=None):
        return Response(DonationRequestSerializer(self._get(pk)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Donations"], request=DonationRequestCreateSerializer, responses={201: DonationRequestSerializer})
    def create(self, request):
        s = DonationRequestCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        donation = DonationService().create(data=s.validated_data, donor_user=request.user)
        return Response(
            {
                "message": "Donation request submitted successfully",
                "data": DonationRequestSerializer(donation).data,
                "warning_messages": donation.eligibility.get("warning_messages", []),
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(tags=["Donations"], responses={200: DonationRequestSerializer(many=True)})
    @action(detail=False, methods=["get"])
    def pending(self, request):
        return paginate(request, DonationSelector.pending(), DonationRequestSerializer)

    @extend_schema(tags=["Donations"], request=DonationApproveSerializer, responses={200: DonationApprovalResponseSerializer})
    @action(detail=True, methods=["put"])
    def approve(self, request, pk=None):
        s = DonationApproveSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        self._get(pk)
        result = DonationService().approve(
            donation_id=pk,
            blood_bag_number=s.validated_data["blood_bag_number"],
            actor=request.user,
        )
        donation = result.donation
        payload = {
            "message": (
                f"Donation approved. {donation.units} unit(s) of {donation.blood_group} added to stock "
                f"with Bag #: {donation.blood_bag_number}"
            ),
            "transaction_id": result.transaction_id,
            "previous_stock": result.change.previous_units,
            "new_stock": result.change.new_units,
            "history_recorded": result.history_recorded,
            "data": donation,
        }
        return Response(DonationApprovalResponseSerializer(payload).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Donations"], request=DonationRejectSerializer, responses={200: DonationRequestSerializer})
    @action(detail=True, methods=["put"])
    def reject(self, request, pk=None):
        s = DonationRejectSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        self._get(pk)
        donation = DonationService().reject(donation_id=pk, reason=s.validated_data["reason"], actor=request.user)
        return Response(
            {"message": "Donation request rejected", "data": DonationRequestSerializer(donation).data},
            status=status.HTTP_200_OK,
        )

    @extend_schema(tags=["Donations"], responses={200: OpenApiTypes.OBJECT})
    def destroy(self, request, pk=None):
        self._get(pk)
        DonationService().delete(donation_id=pk)
        return Response({"message": "Donation request deleted successfully"}, status=status.HTTP_200_OK)
