from django.contrib import admin
from .models import CartItem


class CartItemAdmin(admin.ModelAdmin):
    list_display = ('user', 'product', 'quantity', 'unit_price', 'created_at')
    list_filter = ('product__product_type',)
    search_fields = ('user__email', 'product__name')
    readonly_fields = ('created_at', 'updated_at')


admin.site.register(CartItem, CartItemAdmin)
