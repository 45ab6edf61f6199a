from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class MenuItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    image: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list)
    available_for_sale: bool = True
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    image: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    ingredients: Optional[List[str]] = None
    available_for_sale: Optional[bool] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)

    @field_validator("name", "ingredients", "available_for_sale", "price")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value
