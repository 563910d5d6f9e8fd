"""
Django models for the Listing Optimizer.

Models: Product, Optimization, OptimizationAction, KeywordTracking

Product holds the latest public fields scraped for one ASIN. Optimization is
an append-only record of one generation event. OptimizationAction is the
append-only action log for an optimization (created, viewed, feedback...).
KeywordTracking collapses every suggested keyword per ASIN into one row.
"""

import json
from typing import List

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from listings.utils.keywords import parse_keywords

DEFAULT_MODEL_NAME = "gemini-2.0-flash"


def default_model_name() -> str:
    """Configured generative model, used when a row is written without one."""
    return getattr(settings, "GEMINI_MODEL", DEFAULT_MODEL_NAME)


class ActionType(models.TextChoices):
    """Action log entry types."""

    CREATED = "created", "Created"
    UPDATED = "updated", "Updated"
    VIEWED = "viewed", "Viewed"
    FEEDBACK = "feedback", "Feedback"


class KeywordSource(models.TextChoices):
    """Where a tracked keyword came from."""

    ORIGINAL = "original", "Original Listing"
    SUGGESTED = "suggested", "AI Suggested"
    MANUAL = "manual", "Manual"


class CompetitionLevel(models.TextChoices):
    """Search competition for a tracked keyword."""

    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"


class Product(models.Model):
    """
    Scraped product listing, one row per ASIN.

    Upserted on every successful fetch; updated_at drives the 24 hour
    freshness window.
    """

    asin = models.CharField(
        max_length=20,
        unique=True,
        help_text="Amazon Standard Identification Number",
    )
    title = models.TextField(help_text="Listing title as scraped")
    bullet_points = models.TextField(
        null=True,
        blank=True,
        help_text="Feature bullets joined with a bullet-prefixed newline",
    )
    description = models.TextField(null=True, blank=True)
    image_url = models.CharField(max_length=500, null=True, blank=True)
    price = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Price as displayed, e.g. '$49.99'",
    )
    availability = models.CharField(max_length=100, default="Unknown")
    rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    review_count = models.PositiveIntegerField(null=True, blank=True)
    brand = models.CharField(max_length=255, null=True, blank=True)
    category = models.CharField(max_length=255, null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        db_table = "products"
        ordering = ["-updated_at"]

    def __str__(self):
        return f"{self.asin}: {self.title[:50]}"

    def to_dict(self) -> dict:
        return {
            "asin": self.asin,
            "title": self.title,
            "bulletPoints": self.bullet_points,
            "description": self.description,
            "imageUrl": self.image_url,
            "price": self.price,
            "availability": self.availability,
            "rating": float(self.rating) if self.rating is not None else None,
            "reviewCount": self.review_count,
            "brand": self.brand,
            "category": self.category,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class Optimization(models.Model):
    """
    One generation event for a product.

    Immutable once written. generated_keywords is always written as a JSON
    array; rows written by older versions may hold other encodings, so reads
    go through the ``keywords`` property.
    """

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="optimizations",
    )
    asin = models.CharField(max_length=20, db_index=True)

    generated_title = models.TextField()
    generated_bullet_points = models.TextField(null=True, blank=True)
    generated_description = models.TextField(null=True, blank=True)
    generated_keywords = models.TextField(
        default="[]",
        blank=True,
        help_text="JSON array of suggested keywords",
    )

    score = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        db_index=True,
    )
    model_name = models.CharField(
        max_length=50,
        default=default_model_name,
        db_index=True,
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Timing and call metadata for the generation run",
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "optimizations"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["asin", "created_at"], name="optimization_asin_created_idx"),
        ]

    def __str__(self):
        return f"{self.asin} optimization #{self.pk} ({self.score})"

    @property
    def keywords(self) -> List[str]:
        return parse_keywords(self.generated_keywords)

    def set_keywords(self, keywords: List[str]) -> None:
        self.generated_keywords = json.dumps(list(keywords))


class OptimizationAction(models.Model):
    """Append-only action log entry for an optimization."""

    asin = models.CharField(max_length=20, db_index=True)
    optimization = models.ForeignKey(
        Optimization,
        on_delete=models.CASCADE,
        related_name="actions",
    )
    action_type = models.CharField(
        max_length=20,
        choices=ActionType.choices,
        default=ActionType.CREATED,
    )
    user_feedback = models.JSONField(null=True, blank=True)
    performance_metrics = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "optimization_history"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.action_type} on optimization #{self.optimization_id}"


class KeywordTracking(models.Model):
    """
    Keyword observed for an ASIN.

    Unique per (asin, keyword); repeat suggestions only refresh updated_at.
    """

    asin = models.CharField(max_length=20, db_index=True)
    keyword = models.CharField(max_length=255, db_index=True)
    source = models.CharField(
        max_length=20,
        choices=KeywordSource.choices,
        default=KeywordSource.SUGGESTED,
        db_index=True,
    )
    search_volume = models.IntegerField(null=True, blank=True)
    competition_level = models.CharField(
        max_length=10,
        choices=CompetitionLevel.choices,
        null=True,
        blank=True,
    )
    relevance_score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "keyword_tracking"
        ordering = ["-updated_at"]
        unique_together = ["asin", "keyword"]

    def __str__(self):
        return f"{self.asin}: {self.keyword}"
