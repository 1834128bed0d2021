"""Tests for the environment-selected backend adapters."""

import pytest
from ordering.cart_backend import get_cart_backend, reset_cart_backend, set_cart_backend
from ordering.cart_backend.fake_adapter import FakeCartBackend
from ordering.cart_backend.http_adapter import HttpCartBackend
from ordering.coupon_backend import get_coupon_backend, reset_coupon_backend
from ordering.coupon_backend.domain_adapter import DomainCouponBackend
from ordering.coupon_backend.http_adapter import HttpCouponBackend
from ordering.order_backend import get_order_backend, reset_order_backend
from ordering.order_backend.fake_adapter import FakeOrderBackend
from ordering.order_backend.http_adapter import HttpOrderBackend


class TestCartBackendFactory:
    def test_fake_by_default(self, monkeypatch):
        monkeypatch.delenv("CART_BACKEND", raising=False)
        reset_cart_backend()
        assert isinstance(get_cart_backend(), FakeCartBackend)

    def test_http_uses_api_url(self, monkeypatch):
        monkeypatch.setenv("CART_BACKEND", "http")
        monkeypatch.setenv("STOREFRONT_API_URL", "http://shop.test/api/")
        reset_cart_backend()
        backend = get_cart_backend()
        assert isinstance(backend, HttpCartBackend)
        assert backend.base_url == "http://shop.test/api"

    def test_unknown_backend(self, monkeypatch):
        monkeypatch.setenv("CART_BACKEND", "grpc")
        reset_cart_backend()
        with pytest.raises(ValueError):
            get_cart_backend()

    def test_override(self):
        backend = FakeCartBackend()
        set_cart_backend(backend)
        assert get_cart_backend() is backend


class TestCouponBackendFactory:
    def test_domain_by_default(self, monkeypatch):
        monkeypatch.delenv("COUPON_BACKEND", raising=False)
        reset_coupon_backend()
        assert isinstance(get_coupon_backend(), DomainCouponBackend)

    def test_http(self, monkeypatch):
        monkeypatch.setenv("COUPON_BACKEND", "http")
        reset_coupon_backend()
        assert isinstance(get_coupon_backend(), HttpCouponBackend)


class TestOrderBackendFactory:
    def test_fake_by_default(self, monkeypatch):
        monkeypatch.delenv("ORDER_BACKEND", raising=False)
        reset_order_backend()
        assert isinstance(get_order_backend(), FakeOrderBackend)

    def test_http(self, monkeypatch):
        monkeypatch.setenv("ORDER_BACKEND", "http")
        reset_order_backend()
        assert isinstance(get_order_backend(), HttpOrderBackend)
