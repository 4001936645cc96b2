# messaging/admin.py
from django.contrib import admin

from accounting.admin import ReadOnlyModelAdmin

from .models import Message


@admin.register(Message)
class MessageAdmin(ReadOnlyModelAdmin):
    list_display = ["sender", "receiver", "read", "created_at", "company"]
    list_filter = ["company", "read"]
    search_fields = ["content", "sender__email", "receiver__email"]
