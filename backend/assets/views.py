# assets/views.py
"""Fixed asset register API."""

from datetime import date

from django.http import Http404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor, require

from . import commands
from .depreciation import (
    accumulated_depreciation_as_of,
    calculate_depreciation,
    depreciation_schedule,
    ppe_net_book_value_as_of,
)
from .models import FixedAsset
from .serializers import (
    AsOfQuerySerializer,
    AssetRegisterSerializer,
    DepreciationRunSerializer,
    DisposalSerializer,
    FixedAssetSerializer,
)


def _fail(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


def _get_asset(actor, pk):
    asset = FixedAsset.objects.filter(company=actor.company, pk=pk).select_related("asset_account").first()
    if asset is None:
        raise Http404
    return asset


class AssetListCreateView(APIView):
    """
    GET  /api/assets/?status=
    POST /api/assets/ -> registers an ACTIVE asset and posts its acquisition
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "assets.view")

        qs = FixedAsset.objects.filter(company=actor.company).select_related("asset_account")
        if request.query_params.get("status"):
            qs = qs.filter(status=request.query_params["status"].upper())
        return Response(FixedAssetSerializer(qs, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = AssetRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.register_asset(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(FixedAssetSerializer(result.data).data, status=status.HTTP_201_CREATED)


class AssetDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "assets.view")

        asset = _get_asset(actor, pk)
        current = calculate_depreciation(asset.cost, asset.purchase_date, asset.useful_life_years, date.today())

        data = FixedAssetSerializer(asset).data
        data["calculated"] = current._asdict()
        data["schedule"] = depreciation_schedule(asset, actor.company.fiscal_year_start_month)
        return Response(data)


class AssetDisposeView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        serializer = DisposalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.dispose_asset(actor, pk, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(FixedAssetSerializer(result.data).data)


class DepreciationRunView(APIView):
    """POST /api/assets/depreciation/run/ -> catch up posted depreciation to as_of."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)

        serializer = DepreciationRunSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.post_monthly_depreciation(actor, serializer.validated_data["as_of"])
        if not result.success:
            return _fail(result)
        return Response(result.data)


class PPESummaryView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "assets.view")

        query = AsOfQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        as_of = query.validated_data.get("as_of") or date.today()

        return Response({
            "as_of": as_of,
            "net_book_value": ppe_net_book_value_as_of(actor.company, as_of),
            "accumulated_depreciation": accumulated_depreciation_as_of(actor.company, as_of),
        })
