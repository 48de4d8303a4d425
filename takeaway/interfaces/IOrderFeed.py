from abc import ABC, abstractmethod
from typing import Callable

from pydantic import BaseModel


class OrderChange(BaseModel):
    event: str  # "insert" | "update" | "delete"
    order_id: int


class ISubscription(ABC):
    @abstractmethod
    def unsubscribe(self) -> None:
        pass


class IOrderFeed(ABC):
    @abstractmethod
    def subscribe(self, callback: Callable[[OrderChange], None], name: str = "anonymous") -> ISubscription:
        pass

    @abstractmethod
    def publish(self, change: OrderChange) -> None:
        pass
