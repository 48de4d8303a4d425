from abc import ABC, abstractmethod
from typing import List, Sequence

from takeaway.domain.lifecycle import OrderStatus
from takeaway.domain.models import Order
from takeaway.domain.schemas import NewOrder

class IOrderRepository(ABC):
    @abstractmethod
    def insert_order(self, new_order: NewOrder) -> Order:
        """Persist the order and its items; the store assigns id and order_number."""

    @abstractmethod
    def get_order(self, order_id: int) -> Order:
        pass

    @abstractmethod
    def list_by_status(self, statuses: Sequence[OrderStatus]) -> List[Order]:
        """Orders in `statuses`, earliest pickup first."""

    @abstractmethod
    def list_all(self) -> List[Order]:
        """Every order, newest first."""

    @abstractmethod
    def update_status(self, order_id: int, status: OrderStatus) -> Order:
        pass
