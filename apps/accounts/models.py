import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.utils import timezone
from .managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Core Identity Model.
    CPF (digits only) is the login identifier.
    The current refresh token lives on the user row and is rotated on every login/refresh.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    cpf = models.CharField(max_length=11, unique=True, db_index=True)

    refresh_token = models.CharField(max_length=128, blank=True, null=True)
    refresh_token_expires_at = models.DateTimeField(blank=True, null=True)

    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = 'cpf'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    def __str__(self):
        return self.cpf

    def has_valid_refresh_token(self, token):
        return (
            bool(self.refresh_token)
            and self.refresh_token == token
            and self.refresh_token_expires_at is not None
            and self.refresh_token_expires_at > timezone.now()
        )
