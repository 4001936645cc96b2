# purchases/views.py
"""Purchasing API. Thin views over purchases/commands.py."""

from django.http import Http404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor, require
from accounting.exports import csv_response
from accounting.fiscal import resolve_range
from accounting.serializers import DateRangeQuerySerializer
from accounting.statements import statement_csv_rows

from . import commands
from .models import Bill, PurchaseOrder, Supplier, SupplierPayment
from .serializers import (
    BillInputSerializer,
    BillSerializer,
    PaymentInputSerializer,
    PostDateSerializer,
    PurchaseOrderInputSerializer,
    PurchaseOrderSerializer,
    SupplierInputSerializer,
    SupplierPaymentSerializer,
    SupplierSerializer,
)
from .statements import supplier_statement


def _fail(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


def _get_or_404(model, actor, pk):
    obj = model.objects.filter(company=actor.company, pk=pk).first()
    if obj is None:
        raise Http404
    return obj


# =============================================================================
# Suppliers
# =============================================================================

class SupplierListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "purchases.view")
        qs = Supplier.objects.filter(company=actor.company)
        search = request.query_params.get("search")
        if search:
            qs = qs.filter(name__icontains=search)
        return Response(SupplierSerializer(qs, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = SupplierInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_supplier(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(SupplierSerializer(result.data).data, status=status.HTTP_201_CREATED)


class SupplierDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "purchases.view")
        return Response(SupplierSerializer(_get_or_404(Supplier, actor, pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = SupplierInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = commands.update_supplier(actor, pk, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(SupplierSerializer(result.data).data)


class SupplierStatementView(APIView):
    """GET /api/purchases/suppliers/<pk>/statement/?start=&end=&export=csv"""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "purchases.view")
        supplier = _get_or_404(Supplier, actor, pk)

        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        start, end = resolve_range(actor.company, query.validated_data.get("start"), query.validated_data.get("end"))

        statement = supplier_statement(actor.company, supplier, start, end)

        if query.validated_data["export"] == "csv":
            return csv_response(f"supplier-statement-{supplier.id}-{start}-{end}.csv", statement_csv_rows(statement))

        data = statement.as_dict()
        data["supplier"] = {"id": supplier.id, "name": supplier.name}
        return Response(data)


# =============================================================================
# Purchase orders
# =============================================================================

class PurchaseOrderListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "purchases.view")
        qs = PurchaseOrder.objects.filter(company=actor.company).select_related("supplier").prefetch_related("items")
        if request.query_params.get("status"):
            qs = qs.filter(status=request.query_params["status"].upper())
        if request.query_params.get("supplier"):
            qs = qs.filter(supplier_id=request.query_params["supplier"])
        return Response(PurchaseOrderSerializer(qs, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = PurchaseOrderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = commands.create_purchase_order(
            actor,
            supplier_id=data["supplier_id"],
            order_date=data["order_date"],
            items=[dict(item) for item in data["items"]],
            due_date=data["due_date"],
            notes=data["notes"],
        )
        if not result.success:
            return _fail(result)
        return Response(PurchaseOrderSerializer(result.data).data, status=status.HTTP_201_CREATED)


class PurchaseOrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "purchases.view")
        return Response(PurchaseOrderSerializer(_get_or_404(PurchaseOrder, actor, pk)).data)


class PurchaseOrderSendView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = PostDateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.send_purchase_order(actor, pk, post_date=serializer.validated_data["post_date"])
        if not result.success:
            return _fail(result)
        return Response(PurchaseOrderSerializer(result.data).data)


class PurchaseOrderPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = PaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.pay_purchase_order(actor, pk, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(
            {
                "purchase_order": PurchaseOrderSerializer(result.data["document"]).data,
                "payment": SupplierPaymentSerializer(result.data["payment"]).data,
            },
            status=status.HTTP_201_CREATED,
        )


# =============================================================================
# Bills
# =============================================================================

class BillListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "purchases.view")
        qs = Bill.objects.filter(company=actor.company).select_related("supplier").prefetch_related("items")
        if request.query_params.get("status"):
            qs = qs.filter(status=request.query_params["status"].upper())
        return Response(BillSerializer(qs, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = BillInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data["items"] = [dict(item) for item in data["items"]]

        result = commands.create_bill(actor, **data)
        if not result.success:
            return _fail(result)
        return Response(BillSerializer(result.data).data, status=status.HTTP_201_CREATED)


class BillRecordView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = PostDateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.record_bill(actor, pk, post_date=serializer.validated_data["post_date"])
        if not result.success:
            return _fail(result)
        return Response(BillSerializer(result.data).data)


class BillPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = PaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.pay_bill(actor, pk, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(
            {
                "bill": BillSerializer(result.data["document"]).data,
                "payment": SupplierPaymentSerializer(result.data["payment"]).data,
            },
            status=status.HTTP_201_CREATED,
        )


class SupplierPaymentListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "purchases.view")
        qs = SupplierPayment.objects.filter(company=actor.company)
        if request.query_params.get("supplier"):
            qs = qs.filter(supplier_id=request.query_params["supplier"])
        return Response(SupplierPaymentSerializer(qs, many=True).data)
