from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("cpf", "is_active", "is_staff", "date_joined", "last_login")
    list_filter = ("is_active", "is_staff")
    search_fields = ("cpf",)
    ordering = ("-date_joined",)
    readonly_fields = ("date_joined", "last_login", "refresh_token_expires_at")

    fieldsets = (
        (None, {"fields": ("cpf", "password")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Session", {"fields": ("last_login", "date_joined", "refresh_token_expires_at")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("cpf", "password1", "password2")}),
    )
