import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator

from foodadmin.models.menu import MenuCategory


class MenuItemBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100, description="Display name of the dish.")
    description: str = Field("", max_length=500)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    category: MenuCategory
    image_url: Optional[HttpUrl] = Field(None, description="Public image URL; empty string means no image.")

    @field_validator("image_url", mode="before")
    @classmethod
    def blank_image_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def image_url_str(self) -> Optional[str]:
        return str(self.image_url) if self.image_url else None


class MenuItemCreate(MenuItemBase):
    """Schema for adding a dish. Stock given here is the opening stock."""
    stock_quantity: int = Field(0, ge=0, description="Opening stock quantity.")


class MenuItemUpdate(MenuItemBase):
    """Schema for editing a dish. Stock changes go through inventory adjustments."""


class MenuItemResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str
    price: Decimal
    category: MenuCategory
    stock_quantity: int
    is_available: bool
    image_url: Optional[str]
    created_at: str
    updated_at: str


def menu_item_response(item) -> MenuItemResponse:
    return MenuItemResponse(
        id=item.id,
        name=item.name,
        description=item.description,
        price=item.price,
        category=item.category,
        stock_quantity=item.stock_quantity,
        is_available=item.is_available,
        image_url=item.image_url,
        created_at=str(item.created_at),
        updated_at=str(item.updated_at),
    )
