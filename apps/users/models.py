from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models

from utils.models import BaseModel


class CustomUserManager(BaseUserManager):

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)

    def _create_user(self, username, email, password, is_staff, is_superuser, **extra_fields):
        user = self.model(
            username=username,
            email=self.normalize_email(email).lower(),
            is_staff=is_staff,
            is_superuser=is_superuser,
            **extra_fields
        )
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, username, email, password=None, **extra_fields):
        return self._create_user(username, email, password, False, False, **extra_fields)

    def create_superuser(self, username, email, password=None, **extra_fields):
        return self._create_user(username, email, password, True, True, **extra_fields)


class User(BaseModel, AbstractUser):
    """Storefront account. Display data (names, phone, avatar) lives on ``Profile``."""
    email = models.EmailField(unique=True)

    objects = CustomUserManager()
    all_objects = models.Manager()

    REQUIRED_FIELDS = ["email"]

    def __str__(self):
        return self.email
