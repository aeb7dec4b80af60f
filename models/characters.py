"""Character definitions and per-hero mechanical state."""

from pydantic import BaseModel, Field, model_validator


class AbilityScores(BaseModel):
    """The six core ability scores."""
    strength: int = 10
    dexterity: int = 10
    constitution: int = 10
    intelligence: int = 10
    wisdom: int = 10
    charisma: int = 10

    def score_for(self, ability: str) -> int:
        """Look up a score by ability name, e.g. "Dexterity"."""
        return getattr(self, ability.lower())


class Character(BaseModel):
    """A party member's static definition, chosen at party selection."""
    id: str                         # Unique identifier
    name: str
    character_class: str = "Fighter"
    ability_scores: AbilityScores = AbilityScores()


class InventoryItem(BaseModel):
    """A stack of identical items."""
    name: str
    quantity: int = Field(default=1, ge=1)


class HeroState(BaseModel):
    """Mutable mechanical state for one party member.

    Handed to the persistence layer as an opaque blob via model_dump().
    """
    hero_id: str
    current_hp: int = Field(ge=0)
    max_hp: int = Field(ge=1)
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    gold: int = Field(default=0, ge=0)
    inventory: list[InventoryItem] = []
    is_defeated: bool = False

    @model_validator(mode="after")
    def _check_hp(self) -> "HeroState":
        if self.current_hp > self.max_hp:
            raise ValueError(
                f"current_hp ({self.current_hp}) exceeds max_hp ({self.max_hp})"
            )
        return self
