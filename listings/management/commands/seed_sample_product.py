"""
Management command to insert a sample product for local development.

Usage:
    python manage.py seed_sample_product
"""

from decimal import Decimal

from django.core.management.base import BaseCommand

from listings.models import Product

SAMPLE_ASIN = "B08N5WRWNW"

SAMPLE_PRODUCT = {
    "title": "Echo Dot (4th Gen) | Smart speaker with Alexa | Charcoal",
    "bullet_points": (
        "• Meet the all-new Echo Dot - Our most popular smart speaker with Alexa. "
        "The sleek, compact design delivers crisp vocals and balanced bass for full sound.\n"
        "• Voice control your entertainment - Stream songs from Amazon Music, "
        "Apple Music, Spotify, SiriusXM, and others.\n"
        "• Make life easier - Set timers, ask questions, play music, and control "
        "compatible smart home devices with your voice."
    ),
    "description": (
        "Introducing Echo Dot - Our most compact smart speaker that fits perfectly "
        "into small spaces. Powered by Alexa, Echo Dot delivers crisp vocals and "
        "balanced bass for full sound that fills the room."
    ),
    "price": "$49.99",
    "availability": "In Stock",
    "rating": Decimal("4.70"),
    "review_count": 89543,
    "brand": "Amazon",
    "category": "Smart Speakers",
}


class Command(BaseCommand):
    help = "Insert the sample Echo Dot product if it is not stored yet"

    def handle(self, *args, **options):
        product, created = Product.objects.get_or_create(
            asin=SAMPLE_ASIN,
            defaults=SAMPLE_PRODUCT,
        )
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created sample product {product.asin}"))
        else:
            self.stdout.write(f"Sample product {product.asin} already exists")
