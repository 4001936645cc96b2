# budgeting/views.py
"""Budget API: monthly entries with actuals and the annual expense report."""

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor, require
from accounting.exports import csv_response

from . import commands
from .reports import annual_budget_report, annual_report_csv_rows, budgets_with_actuals
from .serializers import (
    BudgetCreateSerializer,
    BudgetPeriodQuerySerializer,
    BudgetSerializer,
    BudgetUpdateSerializer,
    BudgetYearQuerySerializer,
)


def _fail(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


class BudgetListCreateView(APIView):
    """
    GET  /api/budgets/?year=&month= -> entries with actuals and variance
    POST /api/budgets/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "budgets.view")

        query = BudgetPeriodQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(budgets_with_actuals(actor.company, **query.validated_data))

    def post(self, request):
        actor = resolve_actor(request)

        serializer = BudgetCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_budget(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(BudgetSerializer(result.data).data, status=status.HTTP_201_CREATED)


class BudgetDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)

        serializer = BudgetUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.update_budget(actor, pk, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(BudgetSerializer(result.data).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)

        result = commands.delete_budget(actor, pk)
        if not result.success:
            return _fail(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AnnualBudgetReportView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "budgets.view")

        query = BudgetYearQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        report = annual_budget_report(actor.company, query.validated_data["year"])

        if query.validated_data["export"] == "csv":
            return csv_response(f"budget-{report['year']}.csv", annual_report_csv_rows(report))
        return Response(report)
