from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import update

from marketplace.data.models import OrderModel
from marketplace.domain.errors import InvalidStatusTransition, OrderNotFound
from marketplace.domain.order_status import OrderStatus, can_transition
from marketplace.services.cart_service import CartService
from marketplace.services.order_service import OrderService


@pytest.fixture
def placed_order(db, notifier, buyer, seller, make_product):
    product = make_product(seller, "Guitar", "150.00")
    CartService(db).add_item(buyer.id, product.id, 1)
    return OrderService(db, notification_service=notifier).create_order(buyer.id)


def test_seller_updates_status(db, notifier, placed_order, seller, buyer):
    orders = OrderService(db, notification_service=notifier)

    updated = orders.update_order_status(seller.id, placed_order["id"], "shipped")

    assert updated["status"] == "shipped"
    assert orders.get_order(buyer.id, placed_order["id"])["status"] == "shipped"
    assert notifier.status_changes == [(buyer.id, placed_order["id"], "shipped")]


def test_permissive_policy_allows_any_assignment(db, notifier, placed_order, seller):
    orders = OrderService(db, notification_service=notifier, status_policy="permissive")

    orders.update_order_status(seller.id, placed_order["id"], OrderStatus.DELIVERED)
    result = orders.update_order_status(seller.id, placed_order["id"], OrderStatus.PENDING)

    assert result["status"] == "pending"


def test_strict_policy_enforces_transition_table(db, notifier, placed_order, seller):
    orders = OrderService(db, notification_service=notifier, status_policy="strict")

    with pytest.raises(InvalidStatusTransition):
        orders.update_order_status(seller.id, placed_order["id"], "delivered")

    orders.update_order_status(seller.id, placed_order["id"], "processing")
    orders.update_order_status(seller.id, placed_order["id"], "shipped")
    orders.update_order_status(seller.id, placed_order["id"], "delivered")

    with pytest.raises(InvalidStatusTransition):
        orders.update_order_status(seller.id, placed_order["id"], "cancelled")


def test_only_sellers_in_the_order_can_update(db, notifier, placed_order, buyer, make_user):
    orders = OrderService(db, notification_service=notifier)
    stranger = make_user("stranger")

    with pytest.raises(OrderNotFound):
        orders.update_order_status(buyer.id, placed_order["id"], "cancelled")
    with pytest.raises(OrderNotFound):
        orders.update_order_status(stranger.id, placed_order["id"], "cancelled")
    with pytest.raises(OrderNotFound):
        orders.update_order_status(stranger.id, 4242, "cancelled")

    assert orders.get_order(buyer.id, placed_order["id"])["status"] == "pending"
    assert notifier.status_changes == []


def test_any_co_seller_can_update_whole_order(db, notifier, buyer, seller, make_user, make_product):
    co_seller = make_user("coseller")
    carts = CartService(db)
    carts.add_item(buyer.id, make_product(seller, "Desk").id, 1)
    carts.add_item(buyer.id, make_product(co_seller, "Chair").id, 1)
    orders = OrderService(db, notification_service=notifier)
    order = orders.create_order(buyer.id)

    result = orders.update_order_status(co_seller.id, order["id"], "cancelled")

    assert result["status"] == "cancelled"


def test_orders_are_scoped_to_the_buyer(db, notifier, placed_order, seller):
    with pytest.raises(OrderNotFound):
        OrderService(db, notification_service=notifier).get_order(seller.id, placed_order["id"])


def test_list_orders_newest_first_with_item_count(db, notifier, buyer, seller, make_product):
    carts = CartService(db)
    orders = OrderService(db, notification_service=notifier)

    carts.add_item(buyer.id, make_product(seller, "Book").id, 1)
    first = orders.create_order(buyer.id)
    carts.add_item(buyer.id, make_product(seller, "Pen", "1.00").id, 1)
    carts.add_item(buyer.id, make_product(seller, "Ink", "2.00").id, 4)
    second = orders.create_order(buyer.id)

    result = orders.list_orders(buyer.id, page=1, limit=10)

    assert [o["id"] for o in result["orders"]] == [second["id"], first["id"]]
    assert [o["item_count"] for o in result["orders"]] == [2, 1]
    assert result["orders"][0]["total_amount"] == Decimal("9.00")
    assert result["pagination"] == {"page": 1, "limit": 10, "count": 2}

    page_two = orders.list_orders(buyer.id, page=2, limit=1)
    assert [o["id"] for o in page_two["orders"]] == [first["id"]]


def test_list_orders_clamps_paging(db, notifier, buyer):
    result = OrderService(db, notification_service=notifier).list_orders(buyer.id, page=0, limit=5000)

    assert result["orders"] == []
    assert result["pagination"]["page"] == 1
    assert result["pagination"]["limit"] == 100


def test_transition_table():
    assert can_transition(OrderStatus.PENDING, OrderStatus.PROCESSING)
    assert can_transition(OrderStatus.SHIPPED, OrderStatus.DELIVERED)
    assert not can_transition(OrderStatus.SHIPPED, OrderStatus.PENDING)
    assert not can_transition(OrderStatus.CANCELLED, OrderStatus.PROCESSING)


def test_status_update_bumps_updated_at_even_when_unchanged(db, notifier, placed_order, seller):
    old = datetime(2020, 1, 1)
    db.execute(update(OrderModel).where(OrderModel.id == placed_order["id"]).values(updated_at=old))
    db.commit()

    orders = OrderService(db, notification_service=notifier)
    result = orders.update_order_status(seller.id, placed_order["id"], "pending")

    assert result["status"] == "pending"
    assert result["updated_at"] > old
