# tests/test_messaging.py
import pytest
from django.contrib.auth import get_user_model

from accounts.authz import actor_for
from messaging.commands import MAX_MESSAGE_LENGTH, contacts, conversation, send_message, unread_total
from messaging.models import Message

User = get_user_model()


@pytest.fixture
def colleague(make_member, company):
    member = make_member("clerk@example.com", name="Clerk")
    return actor_for(member, company)


@pytest.mark.django_db
class TestSendMessage:
    def test_strips_and_stores(self, actor, colleague):
        result = send_message(actor, colleague.user.id, "  Please file the VAT201.  ")

        assert result.success, result.error
        assert result.data.content == "Please file the VAT201."
        assert result.data.read is False

    def test_rejects_empty_and_oversized(self, actor, colleague):
        assert not send_message(actor, colleague.user.id, "   ").success
        assert not send_message(actor, colleague.user.id, "x" * (MAX_MESSAGE_LENGTH + 1)).success
        assert send_message(actor, colleague.user.id, "x" * MAX_MESSAGE_LENGTH).success

    def test_rejects_self_and_outsiders(self, actor):
        outsider = User.objects.create_user(email="outsider@example.com", password="pass1234", name="Outsider")

        assert not send_message(actor, actor.user.id, "note to self").success
        assert not send_message(actor, outsider.id, "hello").success
        assert not Message.objects.exists()


@pytest.mark.django_db
class TestConversation:
    def test_thread_is_ordered_and_marked_read(self, actor, colleague):
        send_message(actor, colleague.user.id, "first")
        send_message(colleague, actor.user.id, "second")
        send_message(actor, colleague.user.id, "third")

        assert unread_total(colleague) == 2

        result = conversation(colleague, actor.user.id)

        assert [m.content for m in result.data] == ["first", "second", "third"]
        assert unread_total(colleague) == 0
        assert unread_total(actor) == 1

    def test_contacts_list_unread_and_last_message(self, actor, colleague):
        send_message(colleague, actor.user.id, "invoice query")
        send_message(colleague, actor.user.id, "any update?")

        rows = contacts(actor)

        assert len(rows) == 1
        assert rows[0]["user_id"] == colleague.user.id
        assert rows[0]["unread"] == 2
        assert rows[0]["last_message"].content == "any update?"
