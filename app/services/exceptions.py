class StoreError(Exception):
    """Base class for errors raised by the store services."""


class ItemNotFound(StoreError):
    def __init__(self, product_id, size, variant_id=None):
        self.product_id = product_id
        self.size = size
        self.variant_id = variant_id
        super().__init__("Item not found in cart")


class ProductNotFound(StoreError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class InvalidQuantity(StoreError):
    pass


class CouponError(StoreError):
    pass


class OrderStateError(StoreError):
    pass


class ReviewError(StoreError):
    pass


class DuplicateReview(ReviewError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__("You have already reviewed this product")


class PurchaseRequired(ReviewError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__("You can only review products you have purchased")
