from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _
from guardian.mixins import GuardianUserMixin


class User(GuardianUserMixin, AbstractUser):
    """
    Club member account with a role and student profile fields.
    """

    class Role(models.TextChoices):
        STUDENT = "student", _("Student")
        ADMIN = "admin", _("Admin")

    email = models.EmailField(
        _("email address"),
        unique=True,
        error_messages={"unique": _("A user with that email already exists.")},
    )
    role = models.CharField(
        _("role"),
        max_length=10,
        choices=Role.choices,
        default=Role.STUDENT,
    )
    student_id = models.CharField(_("student id"), max_length=30, blank=True)
    phone_number = models.CharField(
        _("phone number"),
        max_length=15,
        blank=True,
        help_text=_(
            "Optional phone number in international format (e.g., +1234567890)."
        ),
    )
    department = models.CharField(_("department"), max_length=100, blank=True)
    year = models.CharField(_("year of study"), max_length=20, blank=True)

    class Meta:
        verbose_name = _("user")
        verbose_name_plural = _("users")
        ordering = ["username"]

    def __str__(self):
        return self.username

    def save(self, *args, **kwargs):
        """Ensure email is stored in lowercase."""
        if self.email:
            self.email = self.email.lower()
        super().save(*args, **kwargs)

    @property
    def is_admin(self) -> bool:
        return self.is_superuser or self.role == self.Role.ADMIN

    def get_full_name(self):
        """Return the first_name plus the last_name, with a space in between."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.username
