# tax/views.py
"""
Tax API: VAT returns, income tax computation, PAYE and a VAT calculator.

Returns are recomputed from transactions on every request.
"""

from datetime import date

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor, require
from accounting.exports import csv_response
from accounting.fiscal import fiscal_year_dates, resolve_range, selected_fiscal_year
from accounting.serializers import DateRangeQuerySerializer
from reporting.services import income_statement

from .income_tax import compute_income_tax
from .paye import calculate_paye, tax_config_for
from .returns import annual_vat_report, purchase_vat_report, vat201, vat201_csv_rows
from .serializers import IncomeTaxInputSerializer, PayeInputSerializer, VatSplitInputSerializer, YearQuerySerializer
from .vat import company_vat_rate, split_amount


class Vat201View(APIView):
    """
    GET /api/tax/vat201/?start=&end=&export=csv

    Without bounds every transaction is included.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "tax.view")

        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        rows = vat201(actor.company, query.validated_data.get("start"), query.validated_data.get("end"))

        if query.validated_data["export"] == "csv":
            return csv_response("vat201.csv", vat201_csv_rows(rows))
        return Response({"rows": rows})


class AnnualVatView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "tax.view")

        query = YearQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        year = query.validated_data.get("year") or date.today().year

        return Response(annual_vat_report(actor.company, year))


class PurchaseVatView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "tax.view")

        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        start, end = resolve_range(actor.company, query.validated_data.get("start"), query.validated_data.get("end"))

        return Response(purchase_vat_report(actor.company, start, end))


class IncomeTaxView(APIView):
    """
    POST /api/tax/income-tax/

    Profit before tax defaults to the ledger's net profit for the fiscal
    year; the rate defaults to the company's corporate tax rate.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "tax.view")

        serializer = IncomeTaxInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        company = actor.company
        profit = data.get("profit_before_tax")
        if profit is None:
            fiscal_year = data.get("fiscal_year") or selected_fiscal_year(company)
            start, end = fiscal_year_dates(company.fiscal_year_start_month, fiscal_year)
            profit = income_statement(company, start, end)["net_profit"]

        rate = data.get("rate")
        if rate is None:
            rate = company.corporate_tax_rate

        result = compute_income_tax(
            profit,
            non_deductible=data["non_deductible"],
            non_taxable=data["non_taxable"],
            temporary_increase=data["temporary_increase"],
            temporary_decrease=data["temporary_decrease"],
            rate=rate,
        )
        return Response(result._asdict())


class PayeView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "tax.view")

        serializer = PayeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = calculate_paye(config=tax_config_for(actor.company), **serializer.validated_data)
        return Response(result._asdict())


class VatSplitView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "tax.view")

        serializer = VatSplitInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        rate = data.get("rate")
        if rate is None:
            rate = company_vat_rate(actor.company)
        split = split_amount(data["amount"], rate, inclusive=data["inclusive"])
        return Response({"rate": rate, "inclusive": data["inclusive"], **split._asdict()})
