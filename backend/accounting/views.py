# accounting/views.py
"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authentication, response formatting.
Commands handle: business logic, validation, events.
"""

from django.db.models import Exists, OuterRef
from django.http import Http404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor, require
from .commands import (
    create_account,
    create_bank_account,
    delete_account,
    post_journal,
    reverse_transaction,
    update_account,
)
from .models import Account, BankAccount, LedgerEntry, Transaction
from .serializers import (
    AccountCreateSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
    BankAccountCreateSerializer,
    BankAccountSerializer,
    JournalCreateSerializer,
    ReverseSerializer,
    TransactionSerializer,
)


# =============================================================================
# Account Views
# =============================================================================

class AccountListCreateView(APIView):
    """
    GET /api/accounting/accounts/ -> list accounts for active company
    POST /api/accounting/accounts/ -> create account in active company
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        accounts = Account.objects.filter(
            company=actor.company,
        ).annotate(
            _has_transactions=Exists(
                LedgerEntry.objects.filter(account=OuterRef("pk"))
            ),
        ).order_by("code")

        account_type = request.query_params.get("type")
        if account_type:
            accounts = accounts.filter(account_type=account_type.upper())

        return Response(AccountSerializer(accounts, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = AccountCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_account(actor, **input_serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(AccountSerializer(result.data).data, status=status.HTTP_201_CREATED)


class AccountDetailView(APIView):
    """
    GET / PATCH / DELETE /api/accounting/accounts/<code>/
    """
    permission_classes = [IsAuthenticated]

    def get_object(self, actor, code):
        account = Account.objects.filter(company=actor.company, code=code).first()
        if not account:
            raise Http404
        return account

    def get(self, request, code):
        actor = resolve_actor(request)
        require(actor, "accounts.view")
        return Response(AccountSerializer(self.get_object(actor, code)).data)

    def patch(self, request, code):
        actor = resolve_actor(request)
        account = self.get_object(actor, code)

        input_serializer = AccountUpdateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = update_account(actor, account.id, **input_serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(AccountSerializer(result.data).data)

    def delete(self, request, code):
        actor = resolve_actor(request)
        account = self.get_object(actor, code)

        result = delete_account(actor, account.id)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Bank Account Views
# =============================================================================

class BankAccountListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "banking.view")
        banks = BankAccount.objects.filter(company=actor.company).select_related("ledger_account")
        return Response(BankAccountSerializer(banks, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = BankAccountCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_bank_account(actor, **input_serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BankAccountSerializer(result.data).data, status=status.HTTP_201_CREATED)


# =============================================================================
# Transaction Views
# =============================================================================

class TransactionListCreateView(APIView):
    """
    GET  /api/accounting/transactions/ -> list (filters: type, status, date_from, date_to)
    POST /api/accounting/transactions/ -> post a manual journal
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "journal.view")

        qs = Transaction.objects.filter(company=actor.company).prefetch_related("entries__account")

        params = request.query_params
        if params.get("type"):
            qs = qs.filter(transaction_type=params["type"].upper())
        if params.get("status"):
            qs = qs.filter(status=params["status"].upper())
        if params.get("date_from"):
            qs = qs.filter(date__gte=params["date_from"])
        if params.get("date_to"):
            qs = qs.filter(date__lte=params["date_to"])

        return Response(TransactionSerializer(qs.order_by("-date", "-id")[:500], many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = JournalCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = post_journal(
            actor,
            txn_date=data["date"],
            description=data["description"],
            lines=[dict(line) for line in data["lines"]],
            reference=data["reference"],
            transaction_type=data["transaction_type"],
            vat_rate=data["vat_rate"],
            vat_amount=data["vat_amount"],
            base_amount=data["base_amount"],
            vat_inclusive=data["vat_inclusive"],
            bank_account_id=data["bank_account_id"],
        )
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TransactionSerializer(result.data).data, status=status.HTTP_201_CREATED)


class TransactionDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "journal.view")

        txn = Transaction.objects.filter(company=actor.company, pk=pk).prefetch_related("entries__account").first()
        if not txn:
            raise Http404
        return Response(TransactionSerializer(txn).data)


class TransactionReverseView(APIView):
    """POST /api/accounting/transactions/<pk>/reverse/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = ReverseSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = reverse_transaction(
            actor,
            pk,
            reversal_date=input_serializer.validated_data.get("date"),
            reason=input_serializer.validated_data["reason"],
        )
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "id": result.data["reversal"].id,
                "reverses": result.data["original"].id,
                "status": result.data["original"].status,
            },
            status=status.HTTP_201_CREATED,
        )
