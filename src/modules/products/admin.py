from django.contrib import admin

from modules.products.models import Brand, Category, Feedback, Product, Skin


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "quantity", "category", "brand", "created_at")
    list_filter = ("category", "brand")
    search_fields = ("name",)
    filter_horizontal = ("skins",)


@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):
    list_display = ("product", "account", "rating", "created_at")
    list_filter = ("rating",)


admin.site.register(Category)
admin.site.register(Brand)
admin.site.register(Skin)
