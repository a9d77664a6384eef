from django.db import models
from django.contrib.auth.models import AbstractUser, Group, Permission


# --------------------------------------------------
# Custom User (AUTH_USER_MODEL)
# --------------------------------------------------

class User(AbstractUser):
    """
    Custom User model
    - AUTH_USER_MODEL = core.User
    - one role per account; role decides which API area a user may reach
    """

    class Role(models.TextChoices):
        STUDENT = "student", "Student"
        TRAINER = "trainer", "Trainer"
        CLO = "clo", "CLO"
        RECEPTION = "reception", "Reception"
        ADMIN = "admin", "Admin"
        SUPERADMIN = "superadmin", "Super admin"

    name = models.CharField(max_length=100, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.STUDENT,
        db_index=True,
    )

    # avoid reverse accessor clashes with auth.User
    groups = models.ManyToManyField(
        Group,
        related_name="core_users",
        blank=True,
    )
    user_permissions = models.ManyToManyField(
        Permission,
        related_name="core_users",
        blank=True,
    )

    class Meta:
        app_label = "core"
        db_table = "accounts_user"
        ordering = ["-id"]

    def __str__(self):
        return self.username

    @property
    def display_name(self) -> str:
        return self.name or self.get_full_name() or self.username

    @property
    def is_student(self) -> bool:
        return self.role == self.Role.STUDENT

    @property
    def is_trainer(self) -> bool:
        return self.role == self.Role.TRAINER

    @property
    def is_clo(self) -> bool:
        return self.role == self.Role.CLO

    @property
    def is_reception(self) -> bool:
        return self.role == self.Role.RECEPTION

    @property
    def is_admin_role(self) -> bool:
        return self.role in (self.Role.ADMIN, self.Role.SUPERADMIN) or self.is_superuser
