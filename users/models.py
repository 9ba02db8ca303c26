"""User model for POS staff.

Extends Django's ``AbstractUser`` with a unique normalized email, a display
name, a POS role and the branch whose stock the user's sales and adjustments
target.
"""

from common.choices import UserRole
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """POS staff account.

    Fields:
    - email: login identifier, unique at the database level (normalized).
    - name: display name shown on sales and movements.
    - role: ``admin`` manages catalog, branches and users; ``seller`` sells.
    - branch: assigned branch; required for selling and stock adjustments.
    """

    ROLE_ADMIN = UserRole.ADMIN
    ROLE_SELLER = UserRole.SELLER
    ROLE_CHOICES = UserRole.choices

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150, blank=True)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_SELLER, db_index=True)
    branch = models.ForeignKey(
        "branches.Branch",
        null=True,
        blank=True,
        related_name="users",
        on_delete=models.PROTECT,
    )

    def save(self, *args, **kwargs):
        """Normalize email and derive a username from it when missing."""
        if self.email:
            self.email = self.email.strip().lower()
        if not self.username and self.email:
            self.username = self.email
        if self.name:
            self.name = self.name.strip()
        super().save(*args, **kwargs)

    @property
    def is_pos_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN

    class Meta:
        ordering = ["name", "id"]
        indexes = [
            models.Index(fields=["branch", "role"], name="user_branch_role_idx"),
        ]
