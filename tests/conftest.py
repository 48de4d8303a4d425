import os
import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
_TMP = tempfile.mkdtemp(prefix="takeaway-tests-")

# Settings are read at import time, so the environment must be ready first.
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/test.db"
os.environ["REDIS_URL"] = "redis://127.0.0.1:1/0"  # unreachable: exercises the RAM fallback
os.environ["MENU_PATH"] = str(ROOT / "data" / "menu.json")
for key in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_FROM_NUMBER", "ADMIN_PHONE_NUMBER"):
    os.environ.pop(key, None)

import pytest

from takeaway.domain import models  # noqa: F401
from takeaway.domain.menu import MenuItem
from takeaway.domain.schemas import Customer
from takeaway.infrastructure.database import Base, SessionLocal, engine
from takeaway.infrastructure.order_feed import OrderFeed
from takeaway.infrastructure.repositories.order_repository import SqlOrderRepository


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def feed():
    return OrderFeed()


@pytest.fixture
def repo(feed):
    return SqlOrderRepository(feed=feed, session_factory=SessionLocal)


def make_item(item_id="naan-nature", price="2.50", category="Naans", name=None):
    return MenuItem(id=item_id, name=name or item_id.replace("-", " ").title(), price=Decimal(price), category=category)


@pytest.fixture
def naan():
    return make_item("naan-nature", "2.50", "Naans", "Naan Nature")


@pytest.fixture
def tikka():
    return make_item("poulet-tikka-masala", "12.90", "Plats de Poulet", "Poulet Tikka Masala")


@pytest.fixture
def customer():
    return Customer(user_id="u-1", name="Asha Rao", email="asha@example.com", phone="0601020304")


# Saturday 1 June 2024, mid-afternoon in the restaurant.
NOW = datetime(2024, 6, 1, 15, 5)
