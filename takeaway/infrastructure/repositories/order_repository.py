import logging
from typing import List, Sequence

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError

from takeaway.domain.errors import OrderNotFound, PersistenceError
from takeaway.domain.lifecycle import OrderStatus
from takeaway.domain.models import Order, OrderItem
from takeaway.domain.schemas import NewOrder
from takeaway.infrastructure.database import SessionLocal
from takeaway.interfaces.IOrderFeed import IOrderFeed, OrderChange
from takeaway.interfaces.IOrderRepository import IOrderRepository

logger = logging.getLogger(__name__)


def format_order_number(order_id: int) -> str:
    return f"C{order_id:05d}"


class SqlOrderRepository(IOrderRepository):
    """
    Order store on SQLAlchemy. Every committed write is announced on the feed.
    """

    def __init__(self, feed: IOrderFeed, session_factory=SessionLocal):
        self.feed = feed
        self.session_factory = session_factory

    def insert_order(self, new_order: NewOrder) -> Order:
        session = self.session_factory()
        try:
            order = Order(
                user_id=new_order.customer.user_id,
                customer_name=new_order.customer.name,
                customer_email=new_order.customer.email,
                customer_phone=new_order.customer.phone,
                pickup_time=new_order.pickup_time,
                total_amount=new_order.total_amount,
                notes=new_order.notes,
                status=OrderStatus.PENDING,
            )
            session.add(order)
            session.flush()  # id needed for order_number
            order.order_number = format_order_number(order.id)

            # Same transaction as the order: no order is left without its items.
            session.add_all([
                OrderItem(order_id=order.id, **item.model_dump())
                for item in new_order.items
            ])
            session.commit()
            session.refresh(order)
            logger.info(f"✅ Order {order.order_number} saved ({len(new_order.items)} lines, {order.total_amount}€)")
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"❌ DB Error on insert: {e}")
            raise PersistenceError(str(e)) from e
        finally:
            session.close()

        self.feed.publish(OrderChange(event="insert", order_id=order.id))
        return order

    def get_order(self, order_id: int) -> Order:
        session = self.session_factory()
        try:
            order = session.get(Order, order_id)
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Read Error: {e}")
            raise PersistenceError(str(e)) from e
        finally:
            session.close()
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def list_by_status(self, statuses: Sequence[OrderStatus]) -> List[Order]:
        """
        Kitchen board query.
        Ordered by pickup_time ASC (next pickup first).
        """
        session = self.session_factory()
        try:
            return (
                session.query(Order)
                .filter(Order.status.in_(list(statuses)))
                .order_by(Order.pickup_time, Order.id)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Read Error: {e}")
            raise PersistenceError(str(e)) from e
        finally:
            session.close()

    def list_all(self) -> List[Order]:
        """
        Manager dashboard query.
        Ordered by created_at DESC (Newest first).
        """
        session = self.session_factory()
        try:
            return session.query(Order).order_by(desc(Order.created_at), desc(Order.id)).all()
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Read Error: {e}")
            raise PersistenceError(str(e)) from e
        finally:
            session.close()

    def update_status(self, order_id: int, status: OrderStatus) -> Order:
        session = self.session_factory()
        try:
            order = session.get(Order, order_id)
            if order is None:
                raise OrderNotFound(order_id)
            previous = order.status
            order.status = status
            session.commit()
            session.refresh(order)
            logger.info(f"🔄 Order {order.order_number}: {previous.value} -> {status.value}")
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"❌ DB Error on status update: {e}")
            raise PersistenceError(str(e)) from e
        finally:
            session.close()

        self.feed.publish(OrderChange(event="update", order_id=order_id))
        return order
