from datetime import datetime, timedelta

import pytest

from app.models.coupon import Coupon
from app.services import coupons as coupon_service
from app.services.exceptions import CouponError


def coupon(**fields):
    defaults = dict(code="X", type="percentage", value=10, min_amount=0, max_discount=None)
    defaults.update(fields)
    return Coupon(**defaults)


class TestShippingCost:
    def test_flat_rate_below_threshold(self):
        assert coupon_service.shipping_cost(500) == 99

    def test_free_at_threshold(self):
        assert coupon_service.shipping_cost(999) == 0

    def test_free_for_empty_order(self):
        assert coupon_service.shipping_cost(0) == 0


class TestComputeDiscount:
    def test_percentage(self):
        assert coupon_service.compute_discount(coupon(value=10), 450) == 45

    def test_percentage_capped(self):
        assert coupon_service.compute_discount(coupon(value=50, max_discount=100), 1000) == 100

    def test_fixed_never_exceeds_subtotal(self):
        assert coupon_service.compute_discount(coupon(type="fixed", value=300), 200) == 200

    def test_shipping_waives_flat_rate(self):
        assert coupon_service.compute_discount(coupon(type="shipping", value=0), 500) == 99
        assert coupon_service.compute_discount(coupon(type="shipping", value=0), 1500) == 0


class TestValidateCoupon:
    def test_valid_code_is_case_insensitive(self, db, make_coupon):
        make_coupon(code="SAVE10", value=10)
        found, discount = coupon_service.validate_coupon(db, "save10", 300)
        assert found.code == "SAVE10"
        assert discount == 30

    def test_unknown_code(self, db):
        with pytest.raises(CouponError, match="Invalid coupon code"):
            coupon_service.validate_coupon(db, "NOPE", 300)

    def test_expired_code(self, db, make_coupon):
        make_coupon(code="OLD", valid_until=datetime.utcnow() - timedelta(hours=1))
        with pytest.raises(CouponError):
            coupon_service.validate_coupon(db, "OLD", 300)

    def test_minimum_amount(self, db, make_coupon):
        make_coupon(code="BIG", min_amount=1000)
        with pytest.raises(CouponError, match="Minimum order amount"):
            coupon_service.validate_coupon(db, "BIG", 300)

    def test_usage_limit(self, db, make_coupon):
        make_coupon(code="ONCE", usage_limit=1, used_count=1)
        with pytest.raises(CouponError, match="usage limit"):
            coupon_service.validate_coupon(db, "ONCE", 300)
