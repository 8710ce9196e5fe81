"""
Stripe payment intents and the payment commit.

Committing is two independent writes: the payment is inserted, then the matching
selected class is deleted. Nothing rolls the first write back if the second fails,
and a delete that matches nothing leaves the payment recorded.
"""
import logging
from typing import Any, Dict

import stripe

import config
import database
from schemas import Payment

logger = logging.getLogger("summerchamp.payments")

CURRENCY = "usd"


def create_payment_intent(price: float) -> str:
    """Create a card-only intent for `price` dollars and return its client secret."""
    stripe.api_key = config.STRIPE_SECRET_KEY
    amount = int(round(price * 100))
    intent = stripe.PaymentIntent.create(
        amount=amount,
        currency=CURRENCY,
        payment_method_types=["card"],
    )
    logger.info("created payment intent for %s %s", amount, CURRENCY)
    return intent.client_secret


def commit_payment(payment: Payment) -> Dict[str, Any]:
    record = payment.model_dump(mode="json", exclude_none=True)
    insert_result = database.create_document(database.PAYMENTS, record)
    # selected classes are stored under the class id (PUT /selectedClasses/{id}),
    # so classId is the `_id` of the booking to remove
    delete_result = database.delete_document(database.SELECTED_CLASSES, {"_id": payment.classId})
    logger.info(
        "payment %s recorded for %s, removed %s selected class(es)",
        insert_result["insertedId"],
        payment.user,
        delete_result["deletedCount"],
    )
    return {"insertResult": insert_result, "deleteResult": delete_result}
