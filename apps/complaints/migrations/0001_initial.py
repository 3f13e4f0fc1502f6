import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("listings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Complaint",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("scam", "Scam"),
                            ("inappropriate", "Inappropriate Content"),
                            ("harassment", "Harassment"),
                            ("fake_listing", "Fake Listing"),
                            ("spam", "Spam"),
                            ("other", "Other"),
                        ],
                        help_text="Kind of problem being reported",
                        max_length=20,
                    ),
                ),
                (
                    "description",
                    models.TextField(help_text="Details provided by the reporter"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("open", "Open"),
                            ("resolved", "Resolved"),
                            ("dismissed", "Dismissed"),
                        ],
                        db_index=True,
                        default="open",
                        help_text="Current review status",
                        max_length=20,
                    ),
                ),
                (
                    "reported_by",
                    models.ForeignKey(
                        help_text="User who filed this complaint",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="filed_complaints",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "reported_listing",
                    models.ForeignKey(
                        blank=True,
                        help_text="Listing the complaint is about",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="complaints",
                        to="listings.listing",
                    ),
                ),
                (
                    "reported_user",
                    models.ForeignKey(
                        blank=True,
                        help_text="User the complaint is about",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="complaints_against",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Complaint",
                "verbose_name_plural": "Complaints",
                "ordering": ["-created_at"],
            },
        ),
    ]
