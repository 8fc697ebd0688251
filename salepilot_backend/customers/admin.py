# customers/admin.py

from django.contrib import admin

from customers.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "store_credit", "account_balance", "created_at")
    search_fields = ("name", "phone", "email")
    ordering = ("name",)
    readonly_fields = ("created_at", "updated_at")
