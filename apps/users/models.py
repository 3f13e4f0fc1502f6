import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel

from .managers import CustomUserManager


class CustomUser(AbstractUser, BaseModel):
    """
    A student account. Email is the unique identifier instead of a username;
    ``is_staff`` doubles as the marketplace admin flag.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = None

    email = models.EmailField(_("email address"), unique=True)
    college = models.CharField(max_length=255, blank=True)
    student_id_image = models.URLField(max_length=500, blank=True)
    is_verified = models.BooleanField(default=False)

    # Seller reputation, maintained as a running mean by the rating flow
    average_rating = models.FloatField(default=0)
    num_reviews = models.PositiveIntegerField(default=0)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["email", "is_active"], name="users_email_active_idx"),
            models.Index(fields=["first_name", "last_name"], name="users_name_idx"),
        ]

    def __str__(self):
        return self.email

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip() or self.email

    def get_short_name(self):
        return self.first_name or self.email.split("@")[0]

    def display_name(self, default):
        """Full name, or ``default`` when the user has not set one."""
        return f"{self.first_name} {self.last_name}".strip() or default
