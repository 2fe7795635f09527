# shopcart/api/__init__.py
