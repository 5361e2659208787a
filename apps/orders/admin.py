from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('product', 'product_name', 'quantity', 'price_at_purchase', 'metadata')


class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'status', 'delivery_type', 'total_amount', 'created_at')
    list_filter = ('status', 'delivery_type', 'created_at')
    search_fields = ('id', 'user__username', 'user__email', 'shipping_address__address_line1')
    readonly_fields = ('user', 'total_amount', 'created_at', 'updated_at')
    inlines = [OrderItemInline]


admin.site.register(Order, OrderAdmin)
