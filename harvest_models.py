"""
Harvest data models.

Defines the typed rows produced by the index, detail and reshape stages.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class IndexEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    detail_location: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.name) and bool(self.detail_location)

    def to_row(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.detail_location}


class StatRow(BaseModel):
    attack: Optional[int] = None
    defense: Optional[int] = None
    stamina: Optional[int] = None


class DrinkRow(BaseModel):
    name: str
    instructions: Optional[str] = None
    ingredients: list[str] = Field(default_factory=list)

    def to_row(self) -> dict[str, Any]:
        """Flatten for persistence; ingredients are comma-joined."""
        return {
            "name": self.name,
            "instructions": self.instructions,
            "ingredients": ", ".join(self.ingredients),
        }


class DrinkSearchResponse(BaseModel):
    # Required but nullable: {"drinks": null} means nothing starts with the letter
    drinks: Optional[list[dict[str, Any]]]


# Row schemas a recipe can name under detail.schema
ROW_SCHEMAS = {
    "stat_row": StatRow,
}
