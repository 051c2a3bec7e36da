"""Menu data models."""

from typing import Optional

from pydantic import BaseModel, Field


class MenuItem(BaseModel):
    """Single dish on the menu."""
    id: int
    name: str
    price: float
    description: str = ""
    category: str = "Main Course"
    emoji: str = ""
    available: bool = True


class MenuDocument(BaseModel):
    """On-disk menu file: restaurant header plus the ordered item list."""
    restaurant_name: str = "Our Restaurant"
    date: Optional[str] = None
    menu: list[MenuItem] = Field(default_factory=list)
