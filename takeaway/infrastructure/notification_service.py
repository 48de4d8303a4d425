from twilio.rest import Client
from twilio.base.exceptions import TwilioException
from requests.exceptions import RequestException
import logging

from takeaway.domain.models import Order

logger = logging.getLogger(__name__)

class NotificationService:
    def __init__(self, settings, client=None):
        self.settings = settings
        self.client = client
        self.enabled = client is not None

        # Only initialize if credentials exist in .env
        if self.client is None and settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN:
            try:
                self.client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
                self.enabled = True
                logger.info("✅ NotificationService: Twilio Client Initialized")
            except TwilioException as e:
                logger.error(f"❌ Failed to initialize Twilio Client: {e}")
        elif self.client is None:
            logger.warning("⚠️ NotificationService: Credentials missing in .env. Staff alerts disabled.")

    @staticmethod
    def format_new_order(order: Order) -> str:
        lines = "\n".join(f"- {item.quantity}x {item.item_name}" for item in order.items)
        client = order.customer_name
        if order.customer_phone:
            client += f" ({order.customer_phone})"
        return (
            f"🔔 *NOUVELLE COMMANDE {order.order_number}*\n\n"
            f"👤 Client: {client}\n"
            f"🕒 Récupération: {order.pickup_time:%d/%m/%Y %H:%M}\n"
            f"🛒 Commande:\n{lines}\n\n"
            f"💶 Total: {order.total_amount:.2f}€"
        )

    def notify_staff_new_order(self, order: Order) -> bool:
        """Sends a WhatsApp message to the Admin. Never raises."""
        if not self.enabled or not self.settings.ADMIN_PHONE_NUMBER or not self.settings.TWILIO_FROM_NUMBER:
            logger.debug("NotificationService disabled or Admin number missing.")
            return False

        # Twilio requires the "whatsapp:" prefix
        from_number = self._whatsapp(self.settings.TWILIO_FROM_NUMBER)
        to_number = self._whatsapp(self.settings.ADMIN_PHONE_NUMBER)

        try:
            self.client.messages.create(
                from_=from_number,
                body=self.format_new_order(order),
                to=to_number
            )
            logger.info(f"✅ Staff alert sent for order {order.order_number}")
            return True
        except (TwilioException, RequestException) as e:
            logger.error(f"❌ Failed to send staff alert for {order.order_number}: {e}")
            return False

    @staticmethod
    def _whatsapp(number: str) -> str:
        return number if number.startswith("whatsapp:") else f"whatsapp:{number}"
