"""Character stats"""
from enum import Enum

from levelfit.exceptions import ValidationError


class Stat(str, Enum):
    """The five base stats"""
    STRENGTH = "strength"
    AGILITY = "agility"
    VITALITY = "vitality"
    INTELLIGENCE = "intelligence"
    LUCK = "luck"

    @classmethod
    def parse(cls, value) -> "Stat":
        """Accept a Stat or a case-insensitive stat name"""
        if isinstance(value, Stat):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                message=f"Unknown stat '{value}'",
                field="stat",
                value=value,
            )


ALL_STATS: tuple[Stat, ...] = tuple(Stat)
PHYSICAL_STATS: tuple[Stat, ...] = (Stat.STRENGTH, Stat.AGILITY, Stat.VITALITY)
MENTAL_STATS: tuple[Stat, ...] = (Stat.INTELLIGENCE, Stat.LUCK)
