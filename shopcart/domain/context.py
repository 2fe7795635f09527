# shopcart/domain/context.py
from dataclasses import dataclass
from typing import Optional

from shopcart.domain.schemas import Cart

MIN_IP_LENGTH = 4


@dataclass
class CartContext:
    """
    Kontekst jednego requestu: token identyfikujacy koszyk (cookie)
    i koszyk juz rozwiazany w tym requescie.
    Nie jest wspoldzielony miedzy requestami.
    """

    token: Optional[str]
    user: Optional[str] = None
    ip: Optional[str] = None
    cart: Optional[Cart] = None

    def __post_init__(self):
        # np. "::1" nie przejdzie walidacji koszyka
        if self.ip is not None and len(self.ip) < MIN_IP_LENGTH:
            self.ip = None
