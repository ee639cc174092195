# bb_core/inventory/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from bb_core.common.api.pagination import paginate
from bb_core.common.permissions import IsBloodBankAdmin
from bb_core.inventory.api.serializers import (
    BloodDisposalInputSerializer,
    BloodDonateInputSerializer,
    BloodEntryInputSerializer,
    BloodExchangeInputSerializer,
    BloodStockSerializer,
    DonationHistorySerializer,
    MarkBagUsedInputSerializer,
    StockByGroupSerializer,
    StockOperationResponseSerializer,
)
from bb_core.inventory.models import DonationHistory
from bb_core.inventory.selectors import BagSelector, StockSelector
from bb_core.inventory.services import BagService, StockOperationResult, StockService

BLOOD_GROUP_PARAM = OpenApiParameter(
    name="blood_group",
    type=OpenApiTypes.STR,
    location=OpenApiParameter.QUERY,
    required=True,
    description="One of A+, A-, B+, B-, AB+, AB-, O+, O-.",
)


def _operation_payload(message: str, result: StockOperationResult) -> dict:
    payload = {
        "message": message,
        "transaction_id": result.transaction_id,
        "previous_stock": result.change.previous_units,
        "new_stock": result.change.new_units,
    }
    if result.to_change is not None:
        payload["to_previous_stock"] = result.to_change.previous_units
        payload["to_new_stock"] = result.to_change.new_units
    if result.bag is not None:
        payload["blood_bag_number"] = result.bag.blood_bag_number
    return StockOperationResponseSerializer(payload).data


# ----------------------------
# Stock reads
# ----------------------------
class BloodStockView(APIView):
    permission_classes = [IsBloodBankAdmin]

    @extend_schema(tags=["Stock"], responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return Response({"stock": StockSelector.snapshot()}, status=status.HTTP_200_OK)


class AllBloodStockView(APIView):
    """
    Public availability board: the 8-group snapshot plus the stored rows.
    """
    permission_classes = [AllowAny]

    @extend_schema(tags=["Stock"], responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return Response(
            {
                "stock": StockSelector.snapshot(),
                "stocks": BloodStockSerializer(StockSelector.rows(), many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class BloodStockByGroupView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(tags=["Stock"], parameters=[BLOOD_GROUP_PARAM], responses={200: StockByGroupSerializer})
    def get(self, request):
        data = StockSelector.by_group(blood_group=request.query_params.get("blood_group"))
        return Response({"stock": StockByGroupSerializer(data).data}, status=status.HTTP_200_OK)


class LowStockView(APIView):
    permission_classes = [IsBloodBankAdmin]

    @extend_schema(tags=["Stock"], responses={200: BloodStockSerializer(many=True)})
    def get(self, request):
        rows = BloodStockSerializer(StockSelector.low_stock(), many=True).data
        return Response({"count": len(rows), "data": rows}, status=status.HTTP_200_OK)


# ----------------------------
# Direct ledger operations
# ----------------------------
class BloodEntryView(APIView):
    permission_classes = [IsBloodBankAdmin]

    @extend_schema(tags=["Stock"], request=BloodEntryInputSerializer, responses={201: StockOperationResponseSerializer})
    def post(self, request):
        s = BloodEntryInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)
        donor_details = {k: data.pop(k) for k in BloodEntryInputSerializer.EXTRA_FIELDS if k in data}

        result = StockService().entry(actor=request.user, donor_details=donor_details, **data)

        units = result.change.delta
        message = f"{units} unit(s) of {result.change.blood_group} added to stock with Bag #: {result.bag.blood_bag_number}"
        return Response(_operation_payload(message, result), status=status.HTTP_201_CREATED)


class BloodDonateView(APIView):
    permission_classes = [IsBloodBankAdmin]

    @extend_schema(tags=["Stock"], request=BloodDonateInputSerializer, responses={201: StockOperationResponseSerializer})
    def post(self, request):
        s = BloodDonateInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        result = StockService().donate(actor=request.user, **s.validated_data)

        message = f"{-result.change.delta} unit(s) of {result.change.blood_group} donated successfully"
        return Response(_operation_payload(message, result), status=status.HTTP_201_CREATED)


class BloodExchangeView(APIView):
    permission_classes = [IsBloodBankAdmin]

    @extend_schema(tags=["Stock"], request=BloodExchangeInputSerializer, responses={201: StockOperationResponseSerializer})
    def post(self, request):
        s = BloodExchangeInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        result = StockService().exchange(actor=request.user, **s.validated_data)

        message = (
            f"{result.to_change.delta} unit(s) exchanged: "
            f"{result.change.blood_group} -> {result.to_change.blood_group}"
        )
        return Response(_operation_payload(message, result), status=status.HTTP_201_CREATED)


class BloodDisposalView(APIView):
    permission_classes = [IsBloodBankAdmin]

    @extend_schema(tags=["Stock"], request=BloodDisposalInputSerializer, responses={201: StockOperationResponseSerializer})
    def post(self, request):
        s = BloodDisposalInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        result = StockService().dispose(actor=request.user, **s.validated_data)

        message = f"{-result.change.delta} unit(s) of {result.change.blood_group} disposed"
        return Response(_operation_payload(message, result), status=status.HTTP_201_CREATED)


# ----------------------------
# Blood bag tracking
# ----------------------------
class DonationHistoryViewSet(viewsets.GenericViewSet):
    permission_classes = [IsBloodBankAdmin]

    serializer_class = DonationHistorySerializer
    queryset = DonationHistory.objects.none()

    @extend_schema(
        tags=["Blood bags"],
        parameters=[
            OpenApiParameter(name="blood_group", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="used", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                             description="1 = used bags only, 0 = unused only."),
        ],
    )
    def list(self, request):
        return paginate(request, BagSelector.list_history(params=request.query_params), DonationHistorySerializer)

    @extend_schema(tags=["Blood bags"], parameters=[BLOOD_GROUP_PARAM], responses={200: DonationHistorySerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="available-bags")
    def available_bags(self, request):
        bags = BagSelector.available_bags(blood_group=request.query_params.get("blood_group"))
        return Response({"bags": DonationHistorySerializer(bags, many=True).data}, status=status.HTTP_200_OK)

    @extend_schema(tags=["Blood bags"], request=MarkBagUsedInputSerializer, responses={200: DonationHistorySerializer})
    @action(detail=False, methods=["post"], url_path="mark-used")
    def mark_used(self, request):
        s = MarkBagUsedInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        bag = BagService().mark_used(actor=request.user, **s.validated_data)
        return Response(
            {"message": "Blood marked as used successfully", "data": DonationHistorySerializer(bag).data},
            status=status.HTTP_200_OK,
        )
