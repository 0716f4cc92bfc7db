from django.contrib import admin

from .models import Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'category', 'status', 'date_joined']
    list_filter = ['category', 'status']
    search_fields = ['name', 'email', 'phone']
    exclude = ['password']
