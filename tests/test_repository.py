from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from takeaway.domain.errors import OrderNotFound, PersistenceError
from takeaway.domain.lifecycle import ACTIVE_STATUSES, OrderStatus
from takeaway.domain.schemas import NewOrder, NewOrderItem
from takeaway.infrastructure.database import make_engine
from takeaway.infrastructure.order_feed import OrderFeed
from takeaway.infrastructure.repositories.order_repository import SqlOrderRepository, format_order_number


def new_order(customer, pickup=datetime(2024, 6, 3, 12, 0), lines=((2, "12.90"), (1, "2.50"))):
    items = [
        NewOrderItem(
            item_name=f"Plat {i}",
            item_category="Plats de Poulet",
            quantity=qty,
            unit_price=Decimal(price),
            total_price=Decimal(price) * qty,
        )
        for i, (qty, price) in enumerate(lines)
    ]
    return NewOrder(
        customer=customer,
        pickup_time=pickup,
        total_amount=sum((i.total_price for i in items), Decimal("0")),
        notes="Peu épicé",
        items=items,
    )


def test_insert_assigns_number_and_stores_items(repo, feed, customer):
    events = []
    feed.subscribe(events.append)

    order = repo.insert_order(new_order(customer))

    assert order.order_number == format_order_number(order.id) == "C00001"
    assert order.status == OrderStatus.PENDING
    assert order.total_amount == Decimal("28.30")
    assert order.customer_email == "asha@example.com"
    assert [(i.quantity, i.total_price) for i in order.items] == [(2, Decimal("25.80")), (1, Decimal("2.50"))]
    assert sum(i.total_price for i in order.items) == order.total_amount
    assert [(e.event, e.order_id) for e in events] == [("insert", order.id)]


def test_new_order_rejects_inconsistent_totals(customer):
    with pytest.raises(ValueError):
        NewOrder(
            customer=customer,
            pickup_time=datetime(2024, 6, 3, 12, 0),
            total_amount=Decimal("99"),
            items=[NewOrderItem(item_name="Naan", item_category="Naans", quantity=1,
                                unit_price=Decimal("2.50"), total_price=Decimal("2.50"))],
        )


def test_kitchen_query_orders_by_pickup_and_skips_finished(repo, customer):
    late = repo.insert_order(new_order(customer, pickup=datetime(2024, 6, 3, 20, 0)))
    early = repo.insert_order(new_order(customer, pickup=datetime(2024, 6, 3, 11, 30)))
    done = repo.insert_order(new_order(customer, pickup=datetime(2024, 6, 3, 11, 0)))
    repo.update_status(done.id, OrderStatus.COMPLETED)

    active = repo.list_by_status(ACTIVE_STATUSES)

    assert [o.id for o in active] == [early.id, late.id]


def test_manager_query_is_newest_first(repo, customer):
    first = repo.insert_order(new_order(customer))
    second = repo.insert_order(new_order(customer))
    repo.update_status(first.id, OrderStatus.CANCELLED)

    assert [o.id for o in repo.list_all()] == [second.id, first.id]


def test_update_status_publishes_change(repo, feed, customer):
    order = repo.insert_order(new_order(customer))
    events = []
    feed.subscribe(events.append)

    updated = repo.update_status(order.id, OrderStatus.PREPARING)

    assert updated.status == OrderStatus.PREPARING
    assert repo.get_order(order.id).status == OrderStatus.PREPARING
    assert [(e.event, e.order_id) for e in events] == [("update", order.id)]


def test_unknown_order(repo):
    with pytest.raises(OrderNotFound):
        repo.get_order(404)
    with pytest.raises(OrderNotFound):
        repo.update_status(404, OrderStatus.READY)


def test_store_failure_becomes_persistence_error(tmp_path, customer):
    broken = make_engine(f"sqlite:///{tmp_path}/missing-dir/orders.db")
    feed = OrderFeed()
    events = []
    feed.subscribe(events.append)
    repo = SqlOrderRepository(feed=feed, session_factory=sessionmaker(bind=broken))

    with pytest.raises(PersistenceError):
        repo.insert_order(new_order(customer))
    with pytest.raises(PersistenceError):
        repo.list_all()
    assert events == []
