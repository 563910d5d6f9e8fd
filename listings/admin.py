"""
Django admin configuration for Listing Optimizer models.

Provides read-mostly views over scraped products, optimization runs, their
action log and tracked keywords.
"""

from django.contrib import admin
from django.utils.html import format_html

from listings.models import (
    KeywordTracking,
    Optimization,
    OptimizationAction,
    Product,
)


def _score_color(score):
    if score >= 80:
        return "#28a745"
    if score >= 60:
        return "#ffc107"
    return "#dc3545"


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin interface for scraped products."""

    list_display = [
        "asin",
        "short_title",
        "brand",
        "price",
        "availability",
        "rating",
        "review_count",
        "updated_at",
    ]
    list_filter = ["availability", "category"]
    search_fields = ["asin", "title", "brand"]
    readonly_fields = ["created_at", "updated_at"]
    ordering = ["-updated_at"]

    fieldsets = (
        ("Identity", {
            "fields": ("asin", "title", "brand", "category"),
        }),
        ("Listing Content", {
            "fields": ("bullet_points", "description", "image_url"),
        }),
        ("Market", {
            "fields": ("price", "availability", "rating", "review_count"),
        }),
        ("Metadata", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    def short_title(self, obj):
        return obj.title[:60] + "..." if len(obj.title) > 60 else obj.title
    short_title.short_description = "Title"


class OptimizationActionInline(admin.TabularInline):
    model = OptimizationAction
    extra = 0
    fields = ["action_type", "user_feedback", "performance_metrics", "created_at"]
    readonly_fields = fields
    can_delete = False


@admin.register(Optimization)
class OptimizationAdmin(admin.ModelAdmin):
    """
    Admin interface for optimization runs.

    Keywords are shown through the recovery parser so legacy encodings
    display as a clean list.
    """

    list_display = [
        "id",
        "asin",
        "score_badge",
        "model_name",
        "keyword_list",
        "created_at",
    ]
    list_filter = ["model_name", "created_at"]
    search_fields = ["asin", "generated_title", "generated_keywords"]
    readonly_fields = ["created_at", "metadata", "keyword_list"]
    raw_id_fields = ["product"]
    date_hierarchy = "created_at"
    inlines = [OptimizationActionInline]

    def score_badge(self, obj):
        """Display score as colored badge."""
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 2px 8px; border-radius: 4px;">{}</span>',
            _score_color(obj.score),
            obj.score,
        )
    score_badge.short_description = "Score"
    score_badge.admin_order_field = "score"

    def keyword_list(self, obj):
        return ", ".join(obj.keywords)
    keyword_list.short_description = "Keywords"


@admin.register(OptimizationAction)
class OptimizationActionAdmin(admin.ModelAdmin):
    list_display = ["id", "asin", "optimization", "action_type", "created_at"]
    list_filter = ["action_type"]
    search_fields = ["asin"]
    raw_id_fields = ["optimization"]
    readonly_fields = ["created_at"]


@admin.register(KeywordTracking)
class KeywordTrackingAdmin(admin.ModelAdmin):
    list_display = [
        "keyword",
        "asin",
        "source",
        "search_volume",
        "competition_level",
        "updated_at",
    ]
    list_filter = ["source", "competition_level"]
    search_fields = ["asin", "keyword"]
    readonly_fields = ["created_at", "updated_at"]
