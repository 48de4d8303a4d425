import asyncio
import logging
from pathlib import Path
from typing import Callable

from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from takeaway.application.views import LiveOrderList
from takeaway.domain.lifecycle import STATUS_DISPLAY
from takeaway.domain.schemas import KitchenOrderOut, OrderOut, StatusUpdate, UserProfile
from takeaway.interfaces.auth_routes import require_user, session_token

router = APIRouter(tags=["staff"])
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

# Close code sent to websocket clients without a session.
WS_UNAUTHORIZED = 4401


# --- Kitchen board ---

@router.get("/api/kitchen/orders", response_model=list[KitchenOrderOut])
def kitchen_orders(request: Request, user: UserProfile = Depends(require_user)):
    return request.app.state.kitchen.orders()


@router.post("/api/kitchen/orders/{order_id}/advance", response_model=KitchenOrderOut)
def kitchen_advance(order_id: int, payload: StatusUpdate, request: Request, user: UserProfile = Depends(require_user)):
    order = request.app.state.kitchen.advance(order_id, payload.status)
    return KitchenOrderOut.model_validate(order)


# --- Manager dashboard ---

@router.get("/api/manager/orders", response_model=list[OrderOut])
def manager_orders(request: Request, user: UserProfile = Depends(require_user)):
    return request.app.state.manager.orders()


@router.put("/api/manager/orders/{order_id}/status", response_model=OrderOut)
def manager_set_status(order_id: int, payload: StatusUpdate, request: Request, user: UserProfile = Depends(require_user)):
    order = request.app.state.manager.set_status(order_id, payload.status)
    logger.info(f"Manager {user.email} set order {order.order_number} to {order.status.value}")
    return OrderOut.model_validate(order)


@router.get("/api/orders/{order_id}", response_model=OrderOut)
def order_detail(order_id: int, request: Request, user: UserProfile = Depends(require_user)):
    return request.app.state.manager.order_detail(order_id)


# --- HTML screens ---

@router.get("/kitchen", response_class=HTMLResponse)
def kitchen_page(request: Request, user: UserProfile = Depends(require_user)):
    return templates.TemplateResponse(
        request, "kitchen.html", {"orders": request.app.state.kitchen.orders(), "user": user}
    )


@router.get("/manager", response_class=HTMLResponse)
def manager_page(request: Request, user: UserProfile = Depends(require_user)):
    return templates.TemplateResponse(
        request,
        "manager.html",
        {"orders": request.app.state.manager.orders(), "statuses": STATUS_DISPLAY, "user": user},
    )


# --- Live feeds ---

@router.websocket("/ws/kitchen")
async def kitchen_feed(websocket: WebSocket):
    board = websocket.app.state.kitchen
    await _stream_orders(websocket, lambda: [o.model_dump(mode="json") for o in board.orders()], "kitchen")


@router.websocket("/ws/manager")
async def manager_feed(websocket: WebSocket):
    dashboard = websocket.app.state.manager
    await _stream_orders(websocket, lambda: [o.model_dump(mode="json") for o in dashboard.orders()], "manager")


async def _stream_orders(websocket: WebSocket, fetch: Callable[[], list], name: str):
    """
    Push the full list on connect and again after every change to the orders
    table. The subscription is released exactly once when the socket closes.
    """
    if websocket.app.state.sessions.get_user(session_token(websocket)) is None:
        await websocket.close(code=WS_UNAUTHORIZED)
        return
    await websocket.accept()

    loop = asyncio.get_running_loop()
    snapshots: asyncio.Queue = asyncio.Queue()
    # Store writes run in the threadpool, so each refresh hops back onto the loop.
    live = LiveOrderList(
        websocket.app.state.feed,
        fetch,
        name=f"ws-{name}",
        on_refresh=lambda orders: loop.call_soon_threadsafe(snapshots.put_nowait, orders),
    )

    async def pump():
        while True:
            orders = await snapshots.get()
            await websocket.send_json({"orders": orders})

    pump_task = asyncio.create_task(pump())
    try:
        await run_in_threadpool(live.start)
        while True:
            # Clients don't send anything meaningful; this only waits for the disconnect.
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"🔌 {name} feed client disconnected")
    finally:
        live.stop()
        await stop_pump(pump_task)


async def stop_pump(task: asyncio.Task):
    """Cancel the sender task and collect its outcome, including a send on a closed socket."""
    task.cancel()
    try:
        await task
    except (asyncio.CancelledError, WebSocketDisconnect):
        pass
