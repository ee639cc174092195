from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from bb_core.blood_requests.api.serializers import (
    BloodRequestCreateSerializer,
    BloodRequestDonateSerializer,
    BloodRequestRejectSerializer,
    BloodRequestSerializer,
    BloodRequestStatusSerializer,
    DonateFromBankResponseSerializer,
    DonateFromBankSerializer,
)
from bb_core.blood_requests.models import BloodRequest
from bb_core.blood_requests.selectors import BloodRequestSelector
from bb_core.blood_requests.services import BloodRequestService
from bb_core.common.api.pagination import paginate
from bb_core.common.permissions import BloodRequestPermission


def _message(text: str, req: BloodRequest) -> dict:
    return {"message": text, "data": BloodRequestSerializer(req).data}


class BloodRequestViewSet(viewsets.GenericViewSet):
    """
    Recipient blood requests: public board, donor pledges, admin workflow.
    """
    permission_classes = [BloodRequestPermission]

    serializer_class = BloodRequestSerializer
    queryset = BloodRequest.objects.none()

    def _get(self, pk) -> BloodRequest:
        try:
            return BloodRequestSelector.get(request_id=pk)
        except BloodRequestSelector.NotFound:
            raise NotFound("Blood request not found")

    @extend_schema(
        tags=["Blood requests"],
        parameters=[
            OpenApiParameter(name="all", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                             description="Admins only: 1 = include unapproved and cancelled requests."),
            OpenApiParameter(name="blood_group", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="district", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                             description="pending | active | fulfilled | cancelled"),
            OpenApiParameter(name="urgency", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                             description="normal | urgent | emergency"),
            OpenApiParameter(name="approval_status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = BloodRequestSelector.list_requests(params=request.query_params, user=request.user)
        return paginate(request, qs, BloodRequestSerializer)

    @extend_schema(tags=["Blood requests"], responses={200: BloodRequestSerializer})
    def retrieve(self, request, pk=None):
        return Response(BloodRequestSerializer(self._get(pk)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Blood requests"], request=BloodRequestCreateSerializer, responses={201: BloodRequestSerializer})
    def create(self, request):
        s = BloodRequestCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        req = BloodRequestService().create(data=s.validated_data, requested_by=request.user)
        return Response(_message("Blood request created successfully", req), status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Blood requests"],
        parameters=[OpenApiParameter(name="email", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=True)],
        responses={200: BloodRequestSerializer(many=True)},
    )
    @action(detail=False, methods=["get"])
    def mine(self, request):
        qs = BloodRequestSelector.for_requester(email=request.query_params.get("email"))
        return paginate(request, qs, BloodRequestSerializer)

    @extend_schema(tags=["Blood requests"], request=None, responses={200: BloodRequestSerializer})
    @action(detail=True, methods=["put"])
    def approve(self, request, pk=None):
        self._get(pk)
        req = BloodRequestService().approve(request_id=pk, actor=request.user)
        return Response(_message("Blood request approved", req), status=status.HTTP_200_OK)

    @extend_schema(tags=["Blood requests"], request=BloodRequestRejectSerializer, responses={200: BloodRequestSerializer})
    @action(detail=True, methods=["put"])
    def reject(self, request, pk=None):
        s = BloodRequestRejectSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        self._get(pk)
        req = BloodRequestService().reject(request_id=pk, reason=s.validated_data["reason"], actor=request.user)
        return Response(_message("Blood request rejected", req), status=status.HTTP_200_OK)

    @extend_schema(tags=["Blood requests"], request=BloodRequestDonateSerializer, responses={200: BloodRequestSerializer})
    @action(detail=True, methods=["put"])
    def donate(self, request, pk=None):
        s = BloodRequestDonateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        self._get(pk)
        req = BloodRequestService().donate(request_id=pk, donor=request.user, **s.validated_data)
        return Response(_message("Thank you! You have pledged to donate for this request", req), status=status.HTTP_200_OK)

    @extend_schema(tags=["Blood requests"], request=DonateFromBankSerializer, responses={200: DonateFromBankResponseSerializer})
    @action(detail=True, methods=["put"], url_path="donate-from-bank")
    def donate_from_bank(self, request, pk=None):
        s = DonateFromBankSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        self._get(pk)
        req, outcome = BloodRequestService().donate_from_bank(
            request_id=pk,
            units=s.validated_data["units"],
            actor=request.user,
        )
        payload = {
            "message": (
                f"{-outcome.change.delta} unit(s) of {req.blood_group} issued from the blood bank. "
                f"Request fulfilled"
            ),
            "transaction_id": outcome.transaction_id,
            "previous_stock": outcome.change.previous_units,
            "new_stock": outcome.change.new_units,
            "data": req,
        }
        return Response(DonateFromBankResponseSerializer(payload).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Blood requests"], request=BloodRequestStatusSerializer, responses={200: BloodRequestSerializer})
    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request, pk=None):
        s = BloodRequestStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        self._get(pk)
        req = BloodRequestService().update_status(request_id=pk, actor=request.user, **s.validated_data)
        return Response(_message("Blood request status updated successfully", req), status=status.HTTP_200_OK)

    @extend_schema(tags=["Blood requests"], responses={200: OpenApiTypes.OBJECT})
    def destroy(self, request, pk=None):
        self._get(pk)
        BloodRequestService().delete(request_id=pk)
        return Response({"message": "Blood request deleted successfully"}, status=status.HTTP_200_OK)
