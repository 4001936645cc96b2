# messaging/commands.py
"""
Company-internal messaging.

Both parties must be active members of the actor's company.
"""

import logging

from django.db import transaction
from django.db.models import Q

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from accounts.models import CompanyMembership
from events.emitter import emit_event
from events.types import EventTypes

from .models import Message

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000


def _is_member(company, user_id) -> bool:
    return CompanyMembership.objects.filter(company=company, user_id=user_id, is_active=True).exists()


def _between(actor, other_user_id):
    return Message.objects.filter(company=actor.company).filter(
        Q(sender=actor.user, receiver_id=other_user_id) | Q(sender_id=other_user_id, receiver=actor.user)
    )


@transaction.atomic
def send_message(actor: ActorContext, receiver_id: int, content: str) -> CommandResult:
    require(actor, "messages.use")

    content = (content or "").strip()
    if not content:
        return CommandResult.fail("Message cannot be empty.")
    if len(content) > MAX_MESSAGE_LENGTH:
        return CommandResult.fail(f"Message cannot be longer than {MAX_MESSAGE_LENGTH} characters.")
    if receiver_id == actor.user.id:
        return CommandResult.fail("You cannot send a message to yourself.")
    if not _is_member(actor.company, receiver_id):
        return CommandResult.fail("Recipient is not a member of this company.")

    message = Message.objects.create(
        company=actor.company,
        sender=actor.user,
        receiver_id=receiver_id,
        content=content,
    )
    event = emit_event(
        actor,
        EventTypes.MESSAGE_SENT,
        "Message",
        message.id,
        {"message_id": message.id, "receiver_id": receiver_id},
        idempotency_key=f"message.sent:{message.id}",
    )
    return CommandResult.ok(message, event=event)


@transaction.atomic
def conversation(actor: ActorContext, other_user_id: int) -> CommandResult:
    """Messages both ways, oldest first. Marks the ones the actor received as read."""
    require(actor, "messages.use")

    if not _is_member(actor.company, other_user_id):
        return CommandResult.fail("User is not a member of this company.")

    marked = (
        _between(actor, other_user_id)
        .filter(receiver=actor.user, read=False)
        .update(read=True)
    )
    if marked:
        logger.debug("Messages marked read", extra={"user_id": actor.user.id, "count": marked})

    messages = list(_between(actor, other_user_id).select_related("sender", "receiver").order_by("created_at", "id"))
    return CommandResult.ok(messages)


def contacts(actor: ActorContext) -> list:
    """Other active members with their unread count and the last message exchanged."""
    require(actor, "messages.use")

    memberships = (
        CompanyMembership.objects.select_related("user")
        .filter(company=actor.company, is_active=True)
        .exclude(user=actor.user)
        .order_by("user__name", "user__email")
    )

    result = []
    for membership in memberships:
        other = membership.user
        thread = _between(actor, other.id)
        last = thread.order_by("-created_at", "-id").first()
        result.append({
            "user_id": other.id,
            "name": other.name,
            "email": other.email,
            "role": membership.role,
            "unread": thread.filter(sender=other, read=False).count(),
            "last_message": last,
        })
    return result


def unread_total(actor: ActorContext) -> int:
    require(actor, "messages.use")
    return Message.objects.filter(company=actor.company, receiver=actor.user, read=False).count()
