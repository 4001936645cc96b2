# messaging/serializers.py
from rest_framework import serializers

from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source="sender.name", read_only=True)

    class Meta:
        model = Message
        fields = ["id", "sender", "sender_name", "receiver", "content", "read", "created_at"]
        read_only_fields = fields


class MessageInputSerializer(serializers.Serializer):
    receiver_id = serializers.IntegerField()
    content = serializers.CharField(trim_whitespace=False, allow_blank=True)


class ContactSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    name = serializers.CharField()
    email = serializers.EmailField()
    role = serializers.CharField()
    unread = serializers.IntegerField()
    last_message = MessageSerializer(allow_null=True)
