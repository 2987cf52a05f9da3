from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from modules.accounts.models import Account


@admin.register(Account)
class AccountAdmin(UserAdmin):
    list_display = ("username", "email", "role", "balance", "is_active")
    list_filter = ("role", "is_active", "is_staff")
    fieldsets = UserAdmin.fieldsets + (("Storefront", {"fields": ("role", "balance")}),)
