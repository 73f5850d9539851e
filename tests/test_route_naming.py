"""Tests for registry route name resolution."""

import pytest

from shoproute import RegistryEntry, registry_route_name


def test_explicit_name_wins():
    assert registry_route_name("orders", {"route": "/x", "name": "dashboard", "template": "t"}) == (
        "dashboard"
    )


def test_explicit_name_is_truncated_at_colon():
    assert registry_route_name("orders", {"route": "/x", "name": "a:b"}) == "a"


def test_package_and_template():
    assert registry_route_name("orders", {"route": "/orders", "template": "list"}) == "orders/list"


def test_template_params_are_dropped_from_name():
    entry = {"route": "/product/:handle", "template": "productDetail:handle"}
    assert registry_route_name("product", entry) == "product/productDetail"


def test_package_name_alone():
    assert registry_route_name("orders", {"route": "/orders"}) == "orders"


def test_package_name_with_param_marker():
    assert registry_route_name("reaction-product:variant", {"route": "/p"}) == "reaction-product"


@pytest.mark.parametrize("package_name", [None, ""])
def test_missing_package_name_returns_none(package_name):
    assert registry_route_name(package_name, {"route": "/x", "name": "explicit"}) is None


def test_missing_entry_returns_none():
    assert registry_route_name("orders", None) is None


def test_empty_entry_falls_back_to_package_name():
    assert registry_route_name("orders", {}) == "orders"


def test_accepts_validated_models():
    entry = RegistryEntry(route="/tags", template="tagGrid")
    assert registry_route_name("tags", entry) == "tags/tagGrid"
