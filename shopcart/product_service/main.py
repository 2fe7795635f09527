# shopcart/product_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Product Service (dev mock)")

# stockAmount: -1 = nielimitowany
PRODUCTS = {
    "kbd-001": {
        "_id": "kbd-001",
        "name": "Keyboard",
        "type": "product",
        "subtype": "physical",
        "stockAmount": 25,
        "url": "keyboard",
        "prices": {"price": 199.99, "priceNoTax": 162.59, "tax": 37.40},
    },
    "ebook-001": {
        "_id": "ebook-001",
        "name": "Python Cookbook (ebook)",
        "type": "product",
        "subtype": "digital",
        "stockAmount": -1,
        "url": "python-cookbook",
        "prices": {"price": 39.00, "priceNoTax": 31.71, "tax": 7.29},
    },
    "sub-001": {
        "_id": "sub-001",
        "name": "Monthly coffee box",
        "type": "subscription",
        "stockAmount": 3,
        "url": "coffee-box",
        "prices": {"price": 25.00, "priceNoTax": 20.33, "tax": 4.67},
    },
    "mug-001": {
        "_id": "mug-001",
        "name": "Engraved mug",
        "type": "product",
        "subtype": "physical",
        "stockAmount": 10,
        "url": "engraved-mug",
        "properties": {"color": "white"},
        "prices": {"price": 15.50, "priceNoTax": 12.60, "tax": 2.90},
    },
}


@app.get("/products/{product_id}")
def get_product(product_id: str):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
