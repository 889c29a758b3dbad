LOGGER_NAME = "subscriptions"

# Messages recorded on installment details
DETAIL_MESSAGES = {
    "success": "success",
    "failed": "failed",
    "payment_failed": "payment failed",
    "out_of_stock": "out of stock",
}

ORDER_STATES = ("cart", "address", "delivery", "payment", "confirm", "complete")
