import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from takeaway.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# 1. Infrastructure & Domain Imports
from takeaway.domain import models  # noqa: F401  (registers tables on Base)
from takeaway.domain.errors import AuthRequired, ErrorKind, TakeawayError
from takeaway.domain.menu import load_menu
from takeaway.domain.slots import SlotPolicy
from takeaway.infrastructure.database import Base, SessionLocal, engine
from takeaway.infrastructure.notification_service import NotificationService
from takeaway.infrastructure.order_feed import OrderFeed
from takeaway.infrastructure.repositories.order_repository import SqlOrderRepository
from takeaway.infrastructure.session_provider import SessionProvider
from takeaway.infrastructure.state_manager import StateManager
from takeaway.application.checkout import CheckoutService
from takeaway.application.order_controller import OrderController
from takeaway.application.views import KitchenBoard, ManagerDashboard
from takeaway.interfaces import auth_routes, customer_routes, staff_routes

# ---------------------------------------------------------
# DATABASE CONNECTION (With Retry Logic)
# ---------------------------------------------------------
MAX_RETRIES = 10
WAIT_SECONDS = 3

for attempt in range(MAX_RETRIES):
    try:
        logger.info(f"🔄 Attempting DB connection ({attempt + 1}/{MAX_RETRIES})...")
        Base.metadata.create_all(bind=engine)
        logger.info("✅ DB Connected and Tables Created.")
        break  # Success! Exit loop
    except OperationalError:
        logger.warning(f"⚠️ DB not ready yet. Waiting {WAIT_SECONDS}s...")
        time.sleep(WAIT_SECONDS)
else:
    logger.critical("❌ Could not connect to DB after retries.")
    raise RuntimeError("Database unreachable")

# ---------------------------------------------------------
# COMPOSITION ROOT
# ---------------------------------------------------------
policy = SlotPolicy.from_settings(settings)
sessions = SessionProvider()


@asynccontextmanager
async def lifespan(app: FastAPI):
    sessions.start()
    yield
    sessions.stop()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

feed = OrderFeed()
order_repo = SqlOrderRepository(feed=feed, session_factory=SessionLocal)
controller = OrderController(order_repo=order_repo, notifier=NotificationService(settings), policy=policy)

app.state.settings = settings
app.state.clock = policy.now
app.state.sessions = sessions
app.state.feed = feed
app.state.catalog = load_menu(settings.MENU_PATH)
app.state.controller = controller
app.state.checkout = CheckoutService(
    catalog=app.state.catalog,
    carts=StateManager(settings.REDIS_URL, ttl=settings.CART_TTL_SECONDS),
    controller=controller,
    policy=policy,
)
app.state.kitchen = KitchenBoard(controller)
app.state.manager = ManagerDashboard(controller)

# Include Routers
app.include_router(auth_routes.router)
app.include_router(customer_routes.router)
app.include_router(staff_routes.router)

ERROR_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH_REQUIRED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.PERSISTENCE: 502,
}


@app.exception_handler(TakeawayError)
async def takeaway_error_handler(request: Request, exc: TakeawayError):
    body = {"detail": exc.message, "kind": exc.kind.value}
    if isinstance(exc, AuthRequired):
        body["redirect"] = exc.redirect
    if exc.kind == ErrorKind.PERSISTENCE:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=ERROR_STATUS[exc.kind], content=body)


@app.get("/")
def health_check():
    return {"status": "active", "system": settings.PROJECT_NAME, "menu_items": len(app.state.catalog)}
