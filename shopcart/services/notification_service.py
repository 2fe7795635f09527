# shopcart/services/notification_service.py
from kombu.exceptions import OperationalError

from shopcart.celery_worker import celery_app
from shopcart.domain.schemas import Cart
from shopcart.services.cart_cache import CartCache
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


class CartNotifier:
    """
    Powiadomienia o zmianach koszyka ("updated", "removed").
    Celery rozsyla zdarzenie asynchronicznie, worker czysci cache koszykow.
    """

    @staticmethod
    def entity_changed(kind: str, cart: Cart):
        payload = cart.model_dump(by_alias=True, mode="json")
        try:
            cart_entity_changed_task.delay(kind, payload)
        except OperationalError as e:
            # zapis juz sie udal, broker niedostepny = tylko log
            logger.error(f"Could not publish cart.{kind} for cart {cart.id}: {e}")


@celery_app.task(name="shopcart.services.notification_service.cart_entity_changed_task")
def cart_entity_changed_task(kind: str, cart: dict):
    logger.info(f"[CART] cart.{kind}: cart {cart.get('id')}, {len(cart.get('items', []))} items")

    cleaned = CartCache().clean()

    return {"event": f"cart.{kind}", "cart_id": cart.get("id"), "cleaned": cleaned}
