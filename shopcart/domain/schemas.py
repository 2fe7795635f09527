# shopcart/domain/schemas.py
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# wartosci wariantu: rozmiar, kolor, numer seryjny...
PropertyValue = Union[str, int, float, bool, None]


class Requirement(BaseModel):
    """Dane podane przez kupujacego (personalizacja, konfiguracja)."""

    codename: str
    value: str


class ItemDesc(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)


class ItemPrices(BaseModel):
    """Snapshot cen z chwili dodania produktu do koszyka."""

    model_config = ConfigDict(populate_by_name=True)

    price: Optional[float] = Field(None, gt=0)
    price_no_tax: Optional[float] = Field(None, gt=0, alias="priceNoTax")
    price_total: Optional[float] = Field(None, gt=0, alias="priceTotal")
    price_total_no_tax: Optional[float] = Field(None, gt=0, alias="priceTotalNoTax")
    tax: Optional[float] = Field(None, gt=0)


class CartItem(BaseModel):
    """Pozycja w koszyku (line item)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=2)
    external_id: Optional[str] = Field(None, min_length=1, alias="externalId")
    order_code: Optional[str] = Field(None, min_length=1, alias="orderCode")
    amount: float = Field(..., gt=0)
    parent_id: Optional[float] = Field(None, gt=0, alias="parentId")
    item_desc: Optional[ItemDesc] = Field(None, alias="itemDesc")
    properties: Dict[str, PropertyValue] = Field(default_factory=dict)
    prices: Optional[ItemPrices] = None
    requirements: List[Requirement] = Field(default_factory=list)
    url: Optional[str] = Field(None, min_length=2)


class Cart(BaseModel):
    """Koszyk, publiczne pola dokumentu."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    user: Optional[str] = None
    ip: Optional[str] = Field(None, min_length=4)
    hash: str = Field(..., min_length=32)
    order: Optional[str] = None
    date_created: datetime = Field(..., alias="dateCreated")
    date_updated: datetime = Field(..., alias="dateUpdated")
    items: List[CartItem] = Field(default_factory=list)


class Product(BaseModel):
    """Produkt zwracany przez product-service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"))
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    subtype: Optional[str] = None
    # None = brak kontroli stanu, -1 = nielimitowany
    stock_amount: Optional[float] = Field(
        None, validation_alias=AliasChoices("stockAmount", "stock_amount")
    )
    external_id: Optional[str] = Field(None, validation_alias=AliasChoices("externalId", "external_id"))
    order_code: Optional[str] = Field(None, validation_alias=AliasChoices("orderCode", "order_code"))
    parent_id: Optional[float] = Field(None, validation_alias=AliasChoices("parentId", "parent_id"))
    url: Optional[str] = None
    properties: Dict[str, PropertyValue] = Field(default_factory=dict)
    prices: Optional[ItemPrices] = None
    requirements: List[Requirement] = Field(default_factory=list)

    @field_validator("id", "external_id", "order_code", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class AddItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(..., min_length=3, alias="itemId", description="ID produktu")
    amount: float = Field(..., gt=0, description="Ilosc (musi byc > 0)")
    requirements: Optional[List[Requirement]] = None


class UpdateItemAmountIn(BaseModel):
    """Schema dla zmiany ilosci pozycji. Brak itemId = bez zmian, brak amount = 1."""

    model_config = ConfigDict(populate_by_name=True)

    item_id: Optional[str] = Field(None, min_length=3, alias="itemId")
    amount: Optional[float] = Field(None, gt=0)


class CartPatchIn(BaseModel):
    """Schema dla aktualizacji calego koszyka."""

    model_config = ConfigDict(populate_by_name=True)

    cart_new: Dict[str, Any] = Field(..., alias="cartNew")
