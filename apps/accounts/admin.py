from django.contrib import admin

from .models import PasswordResetCode, StaffAccount, SuperAdminAccount


@admin.register(StaffAccount)
class StaffAccountAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'email', 'role', 'status', 'created_at']
    list_filter = ['role', 'status']
    search_fields = ['full_name', 'email', 'phone']
    exclude = ['password', 'user_permissions', 'groups']


@admin.register(SuperAdminAccount)
class SuperAdminAccountAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'status', 'created_at']
    search_fields = ['name', 'email']
    exclude = ['password']


@admin.register(PasswordResetCode)
class PasswordResetCodeAdmin(admin.ModelAdmin):
    list_display = ['email', 'account_kind', 'attempts', 'used', 'created_at', 'expires_at']
    list_filter = ['account_kind', 'used']
    search_fields = ['email']
    exclude = ['code']
    readonly_fields = ['email', 'account_kind', 'attempts', 'used', 'used_at', 'expires_at']
