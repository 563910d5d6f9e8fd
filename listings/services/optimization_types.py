"""
Data types for the optimization workflow.

ListingContent is the input side (stored product fields), GeneratedContent
the four generated fields, and OptimizationResult one complete generation
event before it is persisted.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ListingContent:
    """Product fields the generative prompts are built from."""

    asin: str
    title: str
    bullet_points: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_product(cls, product) -> "ListingContent":
        return cls(
            asin=product.asin,
            title=product.title,
            bullet_points=product.bullet_points,
            description=product.description,
            brand=getattr(product, "brand", None),
            category=getattr(product, "category", None),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "bulletPoints": self.bullet_points,
            "description": self.description,
        }


@dataclass
class GeneratedContent:
    """The four generated fields of one optimization."""

    title: str
    bullet_points: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "bulletPoints": self.bullet_points,
            "description": self.description,
            "suggestedKeywords": list(self.keywords),
        }


@dataclass
class OptimizationResult:
    """
    One generation event: original content, generated content, metadata.

    metadata carries optimizationTime (ms), modelUsed, requestCount and an
    ISO-8601 timestamp.
    """

    asin: str
    original: ListingContent
    optimized: GeneratedContent
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def model_name(self) -> str:
        return self.metadata.get("modelUsed", "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asin": self.asin,
            "original": self.original.to_dict(),
            "optimized": self.optimized.to_dict(),
            "metadata": dict(self.metadata),
        }


@dataclass
class BatchOptimizationResult:
    """Outcome of a serialized batch: successes and per-record failures."""

    successful: List[OptimizationResult] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)
    total_requests: int = 0

    @property
    def total(self) -> int:
        return len(self.successful) + len(self.failed)

    def summary(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "successful": len(self.successful),
            "failed": len(self.failed),
        }
