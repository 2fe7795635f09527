# shopcart/domain/items.py
"""
Reguly stanu koszyka, bez I/O:
- dostepnosc produktu (stan magazynu, typ/subtyp)
- scalanie pozycji (nowa linia vs zwiekszenie ilosci)
- usuwanie i zmiana ilosci pozycji
- rekoncyliacja calego koszyka z czesciowym patchem

Funkcje nie modyfikuja argumentow, zwracaja nowe listy / obiekty.
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from shopcart.domain.errors import InsufficientStock
from shopcart.domain.schemas import Cart, CartItem, ItemDesc, Product, Requirement

SUBSCRIPTION_TYPE = "subscription"
DIGITAL_SUBTYPE = "digital"
UNLIMITED_STOCK = -1

# pola dokumentu ktorych patch nie nadpisuje
IDENTITY_FIELDS = ("id", "_id")


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def check_availability(product: Product, amount: float) -> float:
    """
    Zwraca ilosc ktora mozna dodac albo rzuca InsufficientStock.

    Produkty cyfrowe i subskrypcje zamawia sie po 1 szt., ale tylko
    gdy stan jest nielimitowany (-1). Skonczony stan = odrzucenie.
    """
    stock = product.stock_amount
    if stock is None or amount <= stock:
        return amount

    if product.type == SUBSCRIPTION_TYPE or product.subtype == DIGITAL_SUBTYPE:
        if stock > UNLIMITED_STOCK:
            raise InsufficientStock(product.id, amount, stock)
        return 1

    raise InsufficientStock(product.id, amount, stock)


def attach_requirements(product: Product, requirements: Optional[Sequence[Requirement]]) -> Product:
    if not requirements:
        return product
    return product.model_copy(update={"requirements": list(requirements)})


def build_cart_item(product: Product, amount: float) -> CartItem:
    item_desc = None
    if product.name or product.description:
        item_desc = ItemDesc(name=product.name or None, description=product.description or None)

    return CartItem(
        id=product.id,
        external_id=product.external_id,
        order_code=product.order_code,
        amount=amount,
        parent_id=product.parent_id,
        item_desc=item_desc,
        properties=dict(product.properties),
        prices=product.prices.model_copy() if product.prices else None,
        requirements=list(product.requirements),
        url=product.url,
    )


def line_key(item: CartItem) -> Tuple[str, Tuple[Tuple[str, str], ...], str]:
    """Pozycje rozroznia id produktu + wymagania + wlasciwosci."""
    requirements = tuple((r.codename, r.value) for r in item.requirements)
    properties = json.dumps(item.properties, sort_keys=True, default=str)
    return item.id, requirements, properties


def _pinned_amount(item: CartItem, amount: float) -> float:
    # pozycje z wymaganiami (personalizacja) zawsze po 1 szt.
    # dotyczy tez dodawania i scalania w merge_item, nie tylko set_item_amount
    if item.requirements:
        return 1
    return amount


def merge_item(items: Sequence[CartItem], new_item: CartItem) -> List[CartItem]:
    merged = [i.model_copy(deep=True) for i in items]
    key = line_key(new_item)

    for line in merged:
        if line_key(line) == key:
            line.amount = _pinned_amount(line, line.amount + new_item.amount)
            return merged

    added = new_item.model_copy(deep=True)
    added.amount = _pinned_amount(added, added.amount)
    merged.append(added)
    return merged


def find_line(items: Sequence[CartItem], item_id: str) -> int:
    """Indeks pierwszej pozycji z danym id produktu albo -1."""
    for index, line in enumerate(items):
        if line.id == item_id:
            return index
    return -1


def delete_item(
    items: Sequence[CartItem],
    item_id: Optional[str] = None,
    amount: Optional[float] = None,
) -> List[CartItem]:
    # brak id = wyczysc caly koszyk
    if not item_id:
        return []

    remaining = [i.model_copy(deep=True) for i in items]
    index = find_line(remaining, item_id)
    if index < 0:
        return remaining

    if amount is not None and amount > 0:
        left = remaining[index].amount - amount
        if left <= 0:
            del remaining[index]
        else:
            remaining[index].amount = left
    else:
        del remaining[index]

    return remaining


def set_item_amount(
    items: Sequence[CartItem],
    item_id: Optional[str] = None,
    amount: Optional[float] = 1,
) -> List[CartItem]:
    updated = [i.model_copy(deep=True) for i in items]
    if not item_id or amount is None or amount <= 0:
        return updated

    index = find_line(updated, item_id)
    if index < 0:
        return updated

    # zastapienie, nie inkrementacja
    updated[index].amount = _pinned_amount(updated[index], amount)
    return updated


def touch(cart: Cart, when: Optional[datetime] = None, **changes: Any) -> Cart:
    changes["date_updated"] = when or now_utc()
    return cart.model_copy(update=changes)


def reconcile(cart: Cart, patch: Dict[str, Any], when: Optional[datetime] = None) -> Cart:
    """
    Plytki merge: nadpisuje tylko pola obecne i w koszyku i w patchu.
    Nieznane klucze sa ignorowane, items zastepuje cala liste.
    """
    document = cart.model_dump(by_alias=True)

    for field, value in patch.items():
        if field in IDENTITY_FIELDS:
            continue
        if field in document:
            document[field] = value

    document["dateUpdated"] = when or now_utc()
    return Cart.model_validate(document)
