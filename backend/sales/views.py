# sales/views.py
"""
Sales API.

Thin views: parse input, resolve the actor, call a command, format output.
"""

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
from .models import CreditNote, Customer, Invoice, Product, Quote, Receipt
from .serializers import (
    CancelInputSerializer,
    CreditNoteInputSerializer,
    CreditNoteSerializer,
    CustomerInputSerializer,
    CustomerSerializer,
    InvoiceInputSerializer,
    InvoiceSerializer,
    InvoiceUpdateSerializer,
    PaymentInputSerializer,
    PostDateSerializer,
    ProductInputSerializer,
    ProductSerializer,
    QuoteConvertSerializer,
    QuoteInputSerializer,
    QuoteSerializer,
    ReceiptSerializer,
)
from .statements import customer_statement


def _fail(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


def _get_or_404(model, actor, pk):
    obj = model.objects.filter(company=actor.company, pk=pk).first()
    if obj is None:
        raise Http404
    return obj


# =============================================================================
# Customers & Products
# =============================================================================

class CustomerListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "sales.view")

        qs = Customer.objects.filter(company=actor.company)
        search = request.query_params.get("search")
        if search:
            qs = qs.filter(name__icontains=search)
        return Response(CustomerSerializer(qs, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = CustomerInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_customer(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(CustomerSerializer(result.data).data, status=status.HTTP_201_CREATED)


class CustomerDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "sales.view")
        return Response(CustomerSerializer(_get_or_404(Customer, actor, pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = CustomerInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = commands.update_customer(actor, pk, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(CustomerSerializer(result.data).data)


class CustomerStatementView(APIView):
    """
    GET /api/sales/customers/<pk>/statement/?start=&end=&export=csv

    Missing bounds default to the selected fiscal year.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "sales.view")
        customer = _get_or_404(Customer, actor, pk)

        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        start, end = resolve_range(actor.company, query.validated_data.get("start"), query.validated_data.get("end"))

        statement = customer_statement(actor.company, customer, start, end)

        if query.validated_data["export"] == "csv":
            return csv_response(f"statement-{customer.id}-{start}-{end}.csv", statement_csv_rows(statement))

        data = statement.as_dict()
        data["customer"] = {"id": customer.id, "name": customer.name}
        return Response(data)


class ProductListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "sales.view")
        qs = Product.objects.filter(company=actor.company)
        item_type = request.query_params.get("type")
        if item_type:
            qs = qs.filter(item_type=item_type.upper())
        return Response(ProductSerializer(qs, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = ProductInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_product(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(ProductSerializer(result.data).data, status=status.HTTP_201_CREATED)


class ProductDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = ProductInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = commands.update_product(actor, pk, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(ProductSerializer(result.data).data)


# =============================================================================
# Invoices
# =============================================================================

class InvoiceListCreateView(APIView):
    """
    GET  /api/sales/invoices/?status=&customer=
    POST /api/sales/invoices/ -> DRAFT invoice
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "sales.view")

        qs = Invoice.objects.filter(company=actor.company).select_related("customer").prefetch_related("items")
        if request.query_params.get("status"):
            qs = qs.filter(status=request.query_params["status"].upper())
        if request.query_params.get("customer"):
            qs = qs.filter(customer_id=request.query_params["customer"])
        return Response(InvoiceSerializer(qs, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = InvoiceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = commands.create_invoice(
            actor,
            customer_id=data["customer_id"],
            invoice_date=data["invoice_date"],
            due_date=data["due_date"],
            items=[dict(item) for item in data["items"]],
            notes=data["notes"],
        )
        if not result.success:
            return _fail(result)
        return Response(InvoiceSerializer(result.data).data, status=status.HTTP_201_CREATED)


class InvoiceDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "sales.view")
        return Response(InvoiceSerializer(_get_or_404(Invoice, actor, pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = InvoiceUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updates = dict(serializer.validated_data)
        if "items" in updates:
            updates["items"] = [dict(item) for item in updates["items"]]

        result = commands.update_invoice(actor, pk, **updates)
        if not result.success:
            return _fail(result)
        return Response(InvoiceSerializer(result.data).data)


class InvoiceSendView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = PostDateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.send_invoice(actor, pk, post_date=serializer.validated_data["post_date"])
        if not result.success:
            return _fail(result)
        return Response(InvoiceSerializer(result.data).data)


class InvoicePaymentView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = PaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.record_invoice_payment(actor, pk, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(
            {
                "invoice": InvoiceSerializer(result.data["invoice"]).data,
                "receipt": ReceiptSerializer(result.data["receipt"]).data,
            },
            status=status.HTTP_201_CREATED,
        )


class InvoiceCancelView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = CancelInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.cancel_invoice(actor, pk, reason=serializer.validated_data["reason"])
        if not result.success:
            return _fail(result)
        return Response(InvoiceSerializer(result.data).data)


# =============================================================================
# Quotes
# =============================================================================

class QuoteListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "sales.view")
        qs = Quote.objects.filter(company=actor.company).select_related("customer").prefetch_related("items")
        if request.query_params.get("status"):
            qs = qs.filter(status=request.query_params["status"].upper())
        return Response(QuoteSerializer(qs, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = QuoteInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = commands.create_quote(
            actor,
            customer_id=data["customer_id"],
            quote_date=data["quote_date"],
            expiry_date=data["expiry_date"],
            items=[dict(item) for item in data["items"]],
            notes=data["notes"],
        )
        if not result.success:
            return _fail(result)
        return Response(QuoteSerializer(result.data).data, status=status.HTTP_201_CREATED)


class QuoteConvertView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = QuoteConvertSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.convert_quote_to_invoice(actor, pk, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(InvoiceSerializer(result.data).data, status=status.HTTP_201_CREATED)


class QuoteDeclineView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        result = commands.decline_quote(actor, pk)
        if not result.success:
            return _fail(result)
        return Response(QuoteSerializer(result.data).data)


# =============================================================================
# Credit notes & receipts
# =============================================================================

class CreditNoteListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "sales.view")
        qs = CreditNote.objects.filter(company=actor.company).select_related("customer").prefetch_related("items")
        return Response(CreditNoteSerializer(qs, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = CreditNoteInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = commands.create_credit_note(
            actor,
            customer_id=data["customer_id"],
            credit_note_date=data["credit_note_date"],
            items=[dict(item) for item in data["items"]],
            invoice_id=data["invoice_id"],
            reason=data["reason"],
        )
        if not result.success:
            return _fail(result)
        return Response(CreditNoteSerializer(result.data).data, status=status.HTTP_201_CREATED)


class CreditNoteIssueView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = PostDateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.issue_credit_note(actor, pk, post_date=serializer.validated_data["post_date"])
        if not result.success:
            return _fail(result)
        return Response(CreditNoteSerializer(result.data).data)


class ReceiptListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "sales.view")
        qs = Receipt.objects.filter(company=actor.company).select_related("invoice")
        if request.query_params.get("customer"):
            qs = qs.filter(customer_id=request.query_params["customer"])
        return Response(ReceiptSerializer(qs, many=True).data)
