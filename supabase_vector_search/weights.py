# weights.py
"""
Slot weight normalization for weighted multi-vector search.
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import List, NamedTuple, Optional

from .base import Slot
from .config import DEFAULT_SLOT_WEIGHT, WEIGHT_SUM_TOLERANCE
from .exceptions import InvalidWeights

logger = logging.getLogger(__name__)


class SlotWeights(NamedTuple):
    """Weights for the main embedding and the three sections."""
    main: float
    section_1: float
    section_2: float
    section_3: float

    @property
    def total(self) -> float:
        return sum(self)

    def for_slot(self, slot: Slot) -> float:
        return getattr(self, slot.value)

    def as_list(self) -> List[float]:
        return list(self)


def _resolve(value: Optional[float], name: str) -> float:
    if value is None:
        return DEFAULT_SLOT_WEIGHT
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidWeights(f"Weight '{name}' must be a number, got {value!r}", name)
    value = float(value)
    if not math.isfinite(value):
        raise InvalidWeights(f"Weight '{name}' must be finite, got {value}", name)
    if value < 0:
        raise InvalidWeights(f"Weight '{name}' must be non-negative, got {value}", name)
    return value


def normalize_weights(
    weight_main: Optional[float] = None,
    weight_section_1: Optional[float] = None,
    weight_section_2: Optional[float] = None,
    weight_section_3: Optional[float] = None,
    log: Optional[logging.Logger] = None,
) -> SlotWeights:
    """
    Turn raw slot weights into weights that sum to 1.0.

    Unset weights take the equal share (0.25) whether or not the matching
    query vector is present. Weights already summing to 1.0 within 0.01 are
    returned unchanged; anything else is divided by the total.

    Args:
        weight_main: Weight for the main embedding
        weight_section_1: Weight for section 1
        weight_section_2: Weight for section 2
        weight_section_3: Weight for section 3
        log: Logger for the rescaling event (module logger by default)

    Returns:
        SlotWeights ready for the backend

    Raises:
        InvalidWeights: If a weight is negative/non-finite or all weights are zero
    """
    weights = SlotWeights(
        main=_resolve(weight_main, Slot.MAIN.weight_param),
        section_1=_resolve(weight_section_1, Slot.SECTION_1.weight_param),
        section_2=_resolve(weight_section_2, Slot.SECTION_2.weight_param),
        section_3=_resolve(weight_section_3, Slot.SECTION_3.weight_param),
    )

    total = weights.total
    if total == 0:
        raise InvalidWeights("Cannot normalize weights: all weights are zero")

    if abs(total - 1.0) <= WEIGHT_SUM_TOLERANCE:
        return weights

    normalized = SlotWeights(*(w / total for w in weights))
    (log or logger).info(
        f"Weights sum to {total:.4f}, normalized "
        f"{[round(w, 4) for w in weights]} -> {[round(w, 4) for w in normalized]}"
    )
    return normalized
