import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Message",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "conversation_key",
                    models.CharField(
                        db_index=True,
                        help_text="Sorted sender/receiver ids joined by '_'",
                        max_length=80,
                    ),
                ),
                (
                    "sequence",
                    models.PositiveIntegerField(
                        help_text="Position of this message within its conversation",
                    ),
                ),
                ("text", models.TextField(blank=True, default="")),
                ("attachment_url", models.CharField(blank=True, default="", max_length=500)),
                ("attachment_name", models.CharField(blank=True, default="", max_length=255)),
                ("attachment_size", models.PositiveBigIntegerField(blank=True, null=True)),
                (
                    "attachment_kind",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("image", "Image"),
                            ("video", "Video"),
                            ("audio", "Audio"),
                            ("document", "Document"),
                        ],
                        default="",
                        max_length=10,
                    ),
                ),
                ("delivered", models.BooleanField(default=False)),
                ("read", models.BooleanField(default=False)),
                ("deleted_for_everyone", models.BooleanField(default=False)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                (
                    "receiver",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="received_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["conversation_key", "sequence"],
                "indexes": [
                    models.Index(
                        fields=["receiver", "read"],
                        name="chat_msg_receiver_read_idx",
                    ),
                    models.Index(
                        fields=["conversation_key", "-sequence"],
                        name="chat_msg_conv_latest_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("conversation_key", "sequence"),
                        name="chat_msg_unique_sequence",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="HiddenMessage",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "message",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="hidden_for",
                        to="chat.message",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="hidden_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_hidden_message",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user", "message"),
                        name="chat_hidden_unique_user_message",
                    ),
                ],
            },
        ),
    ]
