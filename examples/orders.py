"""
Sample module for trying flowchart-ast:

    flowchart-ast examples/orders.py --start process_orders --out -
"""
import logging

logger = logging.getLogger(__name__)


def process_orders(orders, limit):
    processed = 0
    logger.info("processing %d orders", len(orders))
    for order in orders:
        if order.cancelled:
            continue
        if processed >= limit:
            logger.warning("limit reached")
            break
        order.ship()
        processed += 1
    return processed


def refund(order, amount):
    try:
        payment = order.payments[-1]
    except IndexError:
        logger.error("no payment for %s", order.id)
        return False
    if amount > payment.total or not order.shipped:
        return False
    payment.refund(amount)
    return True
