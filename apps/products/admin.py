from django.contrib import admin
from .models import Category, Product, ProductOption, Review


class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'product_type', 'base_price', 'premium_price', 'customizable', 'is_available')
    list_filter = ('product_type', 'customizable', 'is_available', 'category')
    search_fields = ('name', 'description')
    readonly_fields = ('created_at', 'updated_at')


class ProductOptionAdmin(admin.ModelAdmin):
    list_display = ('product_type', 'option_category', 'option_name', 'is_premium', 'price_modifier')
    list_filter = ('product_type', 'option_category', 'is_premium')


class ReviewAdmin(admin.ModelAdmin):
    list_display = ('product', 'user', 'rating', 'created_at')
    list_filter = ('rating',)


admin.site.register(Category)
admin.site.register(Product, ProductAdmin)
admin.site.register(ProductOption, ProductOptionAdmin)
admin.site.register(Review, ReviewAdmin)
