# messaging/views.py
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor

from . import commands
from .serializers import ContactSerializer, MessageInputSerializer, MessageSerializer


def _fail(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


class MessageSendView(APIView):
    """POST /api/messages/ {"receiver_id", "content"}"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)

        serializer = MessageInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.send_message(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(MessageSerializer(result.data).data, status=status.HTTP_201_CREATED)


class ConversationView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id):
        actor = resolve_actor(request)

        result = commands.conversation(actor, user_id)
        if not result.success:
            return _fail(result)
        return Response(MessageSerializer(result.data, many=True).data)


class ContactListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        return Response(ContactSerializer(commands.contacts(actor), many=True).data)


class UnreadCountView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        return Response({"unread": commands.unread_total(actor)})
