# shopcart/tasks/clean.py
from shopcart.celery_worker import celery_app
from shopcart.services.sweeper import CartSweeper
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="shopcart.tasks.clean.clean_carts_task")
def clean_carts_task():
    logger.info("Starting to clean up the carts")

    # lock przeciw nakladaniu sie sweepow jest w CartSweeper
    result = CartSweeper().clean_carts()

    logger.info(f"Carts cleaned up: {result}")
    return result
