# events/views.py
"""
Audit log API views.

All endpoints require authentication and are scoped to the user's
active company.
"""

from rest_framework import views
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.authz import require, resolve_actor
from events.models import BusinessEvent
from events.serializers import BusinessEventSerializer


class EventListView(views.APIView):
    """
    List events for the current company.

    GET /api/events/

    Filters:
    - event_type: exact match
    - aggregate_type: exact match
    - aggregate_id: exact match
    - occurred_at__gte / occurred_at__lte: timestamp bounds
    - limit (default 100, max 500) and offset
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "audit.view")

        qs = BusinessEvent.objects.filter(
            company=actor.company
        ).select_related("caused_by_user").order_by("-occurred_at")

        params = request.query_params
        for field in ("event_type", "aggregate_type", "aggregate_id"):
            value = params.get(field)
            if value:
                qs = qs.filter(**{field: value})

        occurred_after = params.get("occurred_at__gte")
        if occurred_after:
            qs = qs.filter(occurred_at__gte=occurred_after)

        occurred_before = params.get("occurred_at__lte")
        if occurred_before:
            qs = qs.filter(occurred_at__lte=occurred_before)

        try:
            limit = min(int(params.get("limit", 100)), 500)
            offset = max(int(params.get("offset", 0)), 0)
        except ValueError:
            return Response({"detail": "limit and offset must be integers."}, status=400)

        total = qs.count()
        page = qs[offset:offset + limit]
        return Response({
            "count": total,
            "limit": limit,
            "offset": offset,
            "results": BusinessEventSerializer(page, many=True).data,
        })
