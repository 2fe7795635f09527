#import modeli zeby SQLAlchemy je zarejestrowal w base metadata

from shopcart.data.models.cart import CartModel

__all__ = ["CartModel"]
