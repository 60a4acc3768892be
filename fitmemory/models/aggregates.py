"""Legacy aggregate document: plain string lists mirroring the record set."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

PREFERRED_EXERCISE_TYPES = "preferred_exercise_types"
AVOIDED_EXERCISE_TYPES = "avoided_exercise_types"
PREFERRED_MEAL_TYPES = "preferred_meal_types"
AVOIDED_MEAL_INGREDIENTS = "avoided_meal_ingredients"

AGGREGATE_FIELDS = (
    PREFERRED_EXERCISE_TYPES,
    AVOIDED_EXERCISE_TYPES,
    PREFERRED_MEAL_TYPES,
    AVOIDED_MEAL_INGREDIENTS,
)


def _string_list(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, str)]


@dataclass
class LegacyAggregates:
    """
    Per-user denormalized lists read by older plan-generation code.

    The record collection is authoritative; these lists are best effort.
    """

    preferred_exercise_types: List[str] = field(default_factory=list)
    avoided_exercise_types: List[str] = field(default_factory=list)
    preferred_meal_types: List[str] = field(default_factory=list)
    avoided_meal_ingredients: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(self.to_dict().values())

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            PREFERRED_EXERCISE_TYPES: list(self.preferred_exercise_types),
            AVOIDED_EXERCISE_TYPES: list(self.avoided_exercise_types),
            PREFERRED_MEAL_TYPES: list(self.preferred_meal_types),
            AVOIDED_MEAL_INGREDIENTS: list(self.avoided_meal_ingredients),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LegacyAggregates":
        """Create from the stored document; missing fields read as empty."""
        return cls(
            preferred_exercise_types=_string_list(data.get(PREFERRED_EXERCISE_TYPES)),
            avoided_exercise_types=_string_list(data.get(AVOIDED_EXERCISE_TYPES)),
            preferred_meal_types=_string_list(data.get(PREFERRED_MEAL_TYPES)),
            avoided_meal_ingredients=_string_list(data.get(AVOIDED_MEAL_INGREDIENTS)),
        )
