# reporting/views.py
"""
Reports API.

GET /api/reports/trial-balance/?period_type=monthly&year=2025&month=1&export=csv
GET /api/reports/income-statement/?start=&end=&export=csv
GET /api/reports/metrics/?as_of=
    /api/reports/trial-balance/lines/  manual lines (CRUD + summary)
"""

from datetime import date

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor, require
from accounting.exports import csv_response
from accounting.fiscal import resolve_range
from accounting.serializers import DateRangeQuerySerializer

from . import commands
from .models import TrialBalanceLine
from .serializers import (
    AsOfQuerySerializer,
    TrialBalanceLineInputSerializer,
    TrialBalanceLineSerializer,
    TrialBalanceQuerySerializer,
)
from .services import (
    financial_metrics,
    income_statement,
    income_statement_csv_rows,
    trial_balance,
    trial_balance_csv_rows,
)


def _fail(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


class TrialBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")

        query = TrialBalanceQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data

        report = trial_balance(actor.company, data["period_type"], data["year"], data.get("month"))
        if data["export"] == "csv":
            require(actor, "reports.export")
            return csv_response(
                f"trial_balance_{data['period_type']}_{data['year']}.csv",
                trial_balance_csv_rows(report),
            )
        return Response(report)


class IncomeStatementView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")

        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        start, end = resolve_range(actor.company, query.validated_data.get("start"), query.validated_data.get("end"))

        report = income_statement(actor.company, start, end)
        if query.validated_data["export"] == "csv":
            require(actor, "reports.export")
            return csv_response(f"income_statement_{start}_{end}.csv", income_statement_csv_rows(report))
        return Response(report)


class FinancialMetricsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")

        query = AsOfQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(financial_metrics(actor.company, query.validated_data.get("as_of") or date.today()))


# =============================================================================
# Manual trial balance lines
# =============================================================================

class TrialBalanceLineListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")
        qs = TrialBalanceLine.objects.filter(company=actor.company)
        return Response(TrialBalanceLineSerializer(qs, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = TrialBalanceLineInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_trial_balance_line(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(TrialBalanceLineSerializer(result.data).data, status=status.HTTP_201_CREATED)


class TrialBalanceLineDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = TrialBalanceLineInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = commands.update_trial_balance_line(actor, pk, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(TrialBalanceLineSerializer(result.data).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)

        result = commands.delete_trial_balance_line(actor, pk)
        if not result.success:
            return _fail(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TrialBalanceLineSummaryView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "reports.view")
        return Response(commands.trial_balance_line_summary(actor.company))
