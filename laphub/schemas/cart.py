from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CartItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        # Storefront product ids arrive as numbers or strings.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class CartUpdate(BaseModel):
    cart: list[CartItem] = Field(default_factory=list)


CartPayload = Union[CartUpdate, list[CartItem]]


class CartResponse(BaseModel):
    ok: Optional[bool] = None
    cart: list[CartItem] = Field(default_factory=list)
    message: Optional[str] = None
