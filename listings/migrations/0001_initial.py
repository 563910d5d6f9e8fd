"""
Initial schema: products, optimizations, optimization_history, keyword_tracking.
"""

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "asin",
                    models.CharField(
                        help_text="Amazon Standard Identification Number",
                        max_length=20,
                        unique=True,
                    ),
                ),
                ("title", models.TextField(help_text="Listing title as scraped")),
                (
                    "bullet_points",
                    models.TextField(
                        blank=True,
                        help_text="Feature bullets joined with a bullet-prefixed newline",
                        null=True,
                    ),
                ),
                ("description", models.TextField(blank=True, null=True)),
                ("image_url", models.CharField(blank=True, max_length=500, null=True)),
                (
                    "price",
                    models.CharField(
                        blank=True,
                        help_text="Price as displayed, e.g. '$49.99'",
                        max_length=50,
                        null=True,
                    ),
                ),
                ("availability", models.CharField(default="Unknown", max_length=100)),
                (
                    "rating",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=3,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("review_count", models.PositiveIntegerField(blank=True, null=True)),
                ("brand", models.CharField(blank=True, max_length=255, null=True)),
                ("category", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "created_at",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now),
                ),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
            ],
            options={
                "db_table": "products",
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="Optimization",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("asin", models.CharField(db_index=True, max_length=20)),
                ("generated_title", models.TextField()),
                ("generated_bullet_points", models.TextField(blank=True, null=True)),
                ("generated_description", models.TextField(blank=True, null=True)),
                (
                    "generated_keywords",
                    models.TextField(
                        blank=True,
                        default="[]",
                        help_text="JSON array of suggested keywords",
                    ),
                ),
                (
                    "score",
                    models.PositiveSmallIntegerField(
                        db_index=True,
                        default=0,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                ("model_name", models.CharField(db_index=True, max_length=50)),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Timing and call metadata for the generation run",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="optimizations",
                        to="listings.product",
                    ),
                ),
            ],
            options={
                "db_table": "optimizations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["asin", "created_at"],
                        name="optimization_asin_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OptimizationAction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("asin", models.CharField(db_index=True, max_length=20)),
                (
                    "action_type",
                    models.CharField(
                        choices=[
                            ("created", "Created"),
                            ("updated", "Updated"),
                            ("viewed", "Viewed"),
                            ("feedback", "Feedback"),
                        ],
                        default="created",
                        max_length=20,
                    ),
                ),
                ("user_feedback", models.JSONField(blank=True, null=True)),
                ("performance_metrics", models.JSONField(blank=True, null=True)),
                (
                    "created_at",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now),
                ),
                (
                    "optimization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="actions",
                        to="listings.optimization",
                    ),
                ),
            ],
            options={
                "db_table": "optimization_history",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="KeywordTracking",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("asin", models.CharField(db_index=True, max_length=20)),
                ("keyword", models.CharField(db_index=True, max_length=255)),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("original", "Original Listing"),
                            ("suggested", "AI Suggested"),
                            ("manual", "Manual"),
                        ],
                        db_index=True,
                        default="suggested",
                        max_length=20,
                    ),
                ),
                ("search_volume", models.IntegerField(blank=True, null=True)),
                (
                    "competition_level",
                    models.CharField(
                        blank=True,
                        choices=[("low", "Low"), ("medium", "Medium"), ("high", "High")],
                        max_length=10,
                        null=True,
                    ),
                ),
                (
                    "relevance_score",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True),
                ),
                (
                    "created_at",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "keyword_tracking",
                "ordering": ["-updated_at"],
                "unique_together": {("asin", "keyword")},
            },
        ),
    ]
