# shopcart/services/product_client.py
import requests

from shopcart.domain.errors import ProductNotFound, ProductServiceUnavailable
from shopcart.domain.schemas import Product
from shopcart.utils.retry import http_retry
from shopcart.utils.settings import PRODUCT_SERVICE_URL
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    def __init__(self, base_url: str | None = None, timeout: int = 2):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _get(self, url: str) -> requests.Response:
        return requests.get(url, timeout=self.timeout)

    def fetch_product(self, product_id: str) -> Product:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        try:
            resp = self._get(url)
            #404 to blad klienta, bez retry
            if resp.status_code == 404:
                raise ProductNotFound(product_id)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            logger.error(f"ProductClient GET {url} failed: {e}")
            raise ProductServiceUnavailable(f"Product service unavailable: {e}") from e

        return Product.model_validate(payload)
