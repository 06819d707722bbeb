"""
Signal handlers for the chat app.

Messages cascade with their users at the database level, but attachment
blobs live in storage and have to be removed explicitly.

Signals:
    pre_delete(User): collect the blobs of every message the user sent
    or received, and delete them once the deletion has committed
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from chat.models import Message
from chat.storage import BlobStorageService

logger = logging.getLogger(__name__)


@receiver(pre_delete, sender=settings.AUTH_USER_MODEL)
def discard_attachments_of_deleted_user(sender, instance, **kwargs):
    """Schedule removal of attachment blobs owned by a user being deleted."""
    urls = list(
        Message.objects.involving(instance.pk)
        .exclude(attachment_url="")
        .values_list("attachment_url", flat=True)
    )
    if not urls:
        return

    logger.info(f"Removing {len(urls)} attachment(s) with account {instance.pk}")

    def discard_all():
        for url in urls:
            BlobStorageService.discard(url)

    transaction.on_commit(discard_all)
