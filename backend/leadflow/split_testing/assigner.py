"""
Deterministic split-test variant assignment.

A session always lands in the same variant of a test for as long as the
test's variant list is unchanged. Adding, removing, reordering or reweighting
variants reshuffles existing sessions, so edit variants only while a test is
in draft.
"""
from typing import Sequence, TypeVar

from leadflow.split_testing.config import SplitTestVariant

V = TypeVar("V", bound=SplitTestVariant)

_UINT32 = 0xFFFFFFFF
_INT32_MIN = 0x80000000


def hash_to_number(text: str) -> int:
    """
    Non-negative 32-bit string hash: h = h * 31 + unit over UTF-16 code units,
    wrapped to a signed 32-bit integer, then absolute value. Matches the
    classic String.hashCode, so assignments stay stable across rewrites.

    abs(-2**31) is 2**31 and is returned as such.
    """
    h = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & _UINT32
    if h & _INT32_MIN:
        h -= 1 << 32
    return abs(h)


def assign_variant(session_id: str, test_id: int, variants: Sequence[V]) -> V:
    """
    Pick the variant for a session. Weights are relative.

    Callers must pass a non-empty list with a positive total weight; configs
    are checked once by validate_variants when a test is saved.
    """
    total_weight = sum(v.weight for v in variants)
    target = hash_to_number(f"{session_id}-{test_id}") % total_weight

    for variant in variants:
        target -= variant.weight
        if target < 0:
            return variant

    return variants[0]
