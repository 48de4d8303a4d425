import pytest

from conftest import make_item
from takeaway.domain.cart import Cart
from takeaway.infrastructure.state_manager import StateManager

UNREACHABLE_REDIS = "redis://127.0.0.1:1/0"


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def carts(clock):
    return StateManager(UNREACHABLE_REDIS, ttl=60, clock=clock)


def cart_with(*items):
    cart = Cart()
    for item in items:
        cart.add(item)
    return cart


def test_falls_back_to_ram_when_redis_is_down(carts, naan):
    assert carts.redis_available is False
    carts.save_cart("abc", cart_with(naan, naan))
    assert carts.get_cart("abc").count() == 2


def test_ram_carts_expire_after_the_ttl(carts, clock, naan):
    carts.save_cart("abc", cart_with(naan))

    clock.now += 59
    assert carts.get_cart("abc").count() == 1

    clock.now += 1
    assert carts.get_cart("abc").is_empty()
    assert carts._memory_store == {}


def test_saving_refreshes_the_ttl(carts, clock, naan):
    carts.save_cart("abc", cart_with(naan))
    clock.now += 50
    carts.save_cart("abc", cart_with(naan, naan))
    clock.now += 50
    assert carts.get_cart("abc").count() == 2


def test_stale_carts_are_dropped_on_write(carts, clock, naan):
    carts.save_cart("old", cart_with(naan))
    clock.now += 120
    carts.save_cart("new", cart_with(make_item("chai-maison", "3.00", "Boissons Maison")))
    assert set(carts._memory_store) == {"cart:new"}


def test_clear_cart(carts, naan):
    carts.save_cart("abc", cart_with(naan))
    carts.clear_cart("abc")
    assert carts.get_cart("abc").is_empty()


def test_checkout_guard_is_exclusive_per_user(carts):
    assert carts.acquire_checkout("u-1")
    assert not carts.acquire_checkout("u-1")
    assert carts.acquire_checkout("u-2")
    carts.release_checkout("u-1")
    assert carts.acquire_checkout("u-1")
