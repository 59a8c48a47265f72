"""Split test variant configuration."""
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, Field


class SplitTestVariant(BaseModel):
    id: str
    name: str = ""
    weight: float
    content_overrides: Dict[str, Any] = Field(default_factory=dict)


class InvalidVariantsError(ValueError):
    """Raised when a split test's variant list cannot be used for assignment."""


def validate_variants(variants: Sequence[SplitTestVariant]) -> List[SplitTestVariant]:
    """
    Accept a variant list only if it has at least two variants, unique
    non-empty ids and strictly positive weights.
    """
    if len(variants) < 2:
        raise InvalidVariantsError("A split test needs at least 2 variants")

    seen = set()
    for variant in variants:
        if not variant.id or not variant.id.strip():
            raise InvalidVariantsError("Variant ids must be non-empty")
        if variant.id in seen:
            raise InvalidVariantsError(f"Duplicate variant id: {variant.id}")
        seen.add(variant.id)
        if variant.weight <= 0:
            raise InvalidVariantsError(f"Variant {variant.id} must have a positive weight")

    return list(variants)


def parse_variants(raw: Any) -> List[SplitTestVariant]:
    """Stored JSON variant list -> models."""
    return [SplitTestVariant.model_validate(v) for v in (raw or [])]
