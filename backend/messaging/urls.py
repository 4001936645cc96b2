# messaging/urls.py
from django.urls import path

from . import views

app_name = "messaging"

urlpatterns = [
    path("", views.MessageSendView.as_view(), name="message-send"),
    path("contacts/", views.ContactListView.as_view(), name="contacts"),
    path("unread/", views.UnreadCountView.as_view(), name="unread"),
    path("with/<int:user_id>/", views.ConversationView.as_view(), name="conversation"),
]
