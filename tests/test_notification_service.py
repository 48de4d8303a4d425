import logging
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from requests.exceptions import ConnectionError, Timeout
from twilio.base.exceptions import TwilioRestException

from takeaway.infrastructure.notification_service import NotificationService

TWILIO = SimpleNamespace(
    TWILIO_ACCOUNT_SID=None,
    TWILIO_AUTH_TOKEN=None,
    TWILIO_FROM_NUMBER="+14155238886",
    ADMIN_PHONE_NUMBER="whatsapp:+33600000000",
)


class FakeMessages:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    def create(self, **kwargs):
        if self.error:
            raise self.error
        self.sent.append(kwargs)


def fake_client(error=None):
    return SimpleNamespace(messages=FakeMessages(error))


def order():
    return SimpleNamespace(
        order_number="C00012",
        customer_name="Asha Rao",
        customer_phone="0601020304",
        pickup_time=datetime(2024, 6, 2, 19, 30),
        total_amount=Decimal("28.30"),
        items=[SimpleNamespace(quantity=2, item_name="Poulet Tikka Masala")],
    )


def test_alert_goes_to_admin_over_whatsapp():
    client = fake_client()
    assert NotificationService(TWILIO, client=client).notify_staff_new_order(order()) is True

    (msg,) = client.messages.sent
    assert msg["from_"] == "whatsapp:+14155238886"
    assert msg["to"] == "whatsapp:+33600000000"
    assert "C00012" in msg["body"]
    assert "2x Poulet Tikka Masala" in msg["body"]
    assert "02/06/2024 19:30" in msg["body"]


@pytest.mark.parametrize("error", [
    ConnectionError("Max retries exceeded with url: /2010-04-01/Accounts"),
    Timeout("read timed out"),
    TwilioRestException(400, "https://api.twilio.com", msg="invalid To number"),
])
def test_send_failures_are_logged_not_raised(error, caplog):
    service = NotificationService(TWILIO, client=fake_client(error))
    with caplog.at_level(logging.ERROR):
        assert service.notify_staff_new_order(order()) is False
    assert "C00012" in caplog.text


def test_disabled_without_credentials():
    settings = SimpleNamespace(**{**vars(TWILIO), "ADMIN_PHONE_NUMBER": None})
    assert NotificationService(settings).notify_staff_new_order(order()) is False
