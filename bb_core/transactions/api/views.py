# bb_core/transactions/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from bb_core.common.permissions import IsBloodBankAdmin
from bb_core.transactions.api.serializers import BloodTransactionSerializer, TransactionStatsSerializer
from bb_core.transactions.models import BloodTransaction
from bb_core.transactions.selectors import TransactionSelector


class BloodTransactionViewSet(viewsets.GenericViewSet):
    """
    Read-only stock movement trail (admin).
    """
    permission_classes = [IsBloodBankAdmin]

    serializer_class = BloodTransactionSerializer
    queryset = BloodTransaction.objects.none()

    @extend_schema(
        tags=["Transactions"],
        responses={200: BloodTransactionSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                             description="entry | donate | exchange | disposal"),
            OpenApiParameter(name="blood_group", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                             description="Matches blood_group or either side of an exchange."),
            OpenApiParameter(name="start_date", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="end_date", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="limit", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False,
                             description="Max records to return (default 100)."),
        ],
    )
    def list(self, request):
        qs = TransactionSelector.list_transactions(params=request.query_params)
        data = BloodTransactionSerializer(qs, many=True).data
        return Response({"count": len(data), "transactions": data}, status=status.HTTP_200_OK)

    @extend_schema(tags=["Transactions"], responses={200: BloodTransactionSerializer})
    def retrieve(self, request, pk=None):
        try:
            tx = TransactionSelector.get(transaction_id=pk)
        except TransactionSelector.NotFound:
            raise NotFound("Transaction not found.")
        return Response(BloodTransactionSerializer(tx).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Transactions"], responses={200: TransactionStatsSerializer})
    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(TransactionStatsSerializer(TransactionSelector.stats()).data, status=status.HTTP_200_OK)
