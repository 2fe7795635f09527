# shopcart/domain/errors.py


class CartError(Exception):
    """Bazowy blad domeny koszyka."""


class ProductNotFound(CartError, LookupError):
    """Produkt o podanym id nie istnieje (blad klienta, bez retry)."""

    def __init__(self, product_id: str):
        super().__init__(f"No matching product found: {product_id}")
        self.product_id = product_id


class InsufficientStock(CartError, ValueError):
    """Zadana ilosc przekracza dostepnosc produktu."""

    def __init__(self, product_id: str, requested: float, available: float):
        super().__init__(
            f"Requested amount is not available: product {product_id}, "
            f"requested {requested}, in stock {available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class StorageUnavailable(CartError, RuntimeError):
    """Odczyt lub zapis do bazy nie powiodl sie."""


class ProductServiceUnavailable(CartError, RuntimeError):
    """Katalog produktow nie odpowiada albo zwraca blad serwera."""
