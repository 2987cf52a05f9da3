from django.contrib import admin

from modules.orders.models import Order, OrderItem, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "quantity", "unit_price", "subtotal")
    can_delete = False


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ("old_status", "new_status", "notes", "created_at")
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "account", "status", "total_amount", "created_at")
    list_filter = ("status",)
    search_fields = ("id", "account__email")
    readonly_fields = ("total_amount", "image_confirm_delivered")
    inlines = [OrderItemInline, OrderStatusHistoryInline]
