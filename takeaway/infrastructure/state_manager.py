import json
import logging
import threading
import time

import redis
from redis.exceptions import RedisError

from takeaway.domain.cart import Cart

logger = logging.getLogger(__name__)


class StateManager:
    """
    Per-browser cart storage plus the checkout in-flight guard.

    Redis first; on any Redis error we switch to process RAM for the rest of
    the process lifetime.
    """

    def __init__(self, redis_url: str, ttl: int = 3600, clock=time.monotonic):
        self.ttl = ttl  # Carts expire after 1 hour by default
        self.clock = clock

        # 1. Primary Memory (Redis)
        try:
            self.redis = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=1  # Fail fast if Redis is down
            )
            # Test connection immediately
            self.redis.ping()
            self.redis_available = True
            logger.info("✅ StateManager: Connected to Redis.")
        except RedisError as e:
            logger.warning(f"⚠️ StateManager: Redis unreachable ({e}). Using RAM fallback.")
            self.redis_available = False

        # 2. Fallback Memory (RAM): key -> (expires_at, payload)
        self._memory_store = {}
        self._memory_locks = set()
        self._lock = threading.Lock()

    # --- Cart ---

    def get_cart(self, cart_id: str) -> Cart:
        key = f"cart:{cart_id}"
        data = None

        if self.redis_available:
            try:
                data = self.redis.get(key)
            except RedisError as e:
                self._handle_redis_error(e)

        if data:
            return Cart.from_dict(json.loads(data))

        ram_data = self._ram_get(key)
        return Cart.from_dict(ram_data) if ram_data else Cart()

    def save_cart(self, cart_id: str, cart: Cart):
        key = f"cart:{cart_id}"
        payload = cart.to_dict()

        if self.redis_available:
            try:
                self.redis.setex(key, self.ttl, json.dumps(payload))
            except RedisError as e:
                self._handle_redis_error(e)

        # Always write to RAM (to keep sync in case Redis fails later)
        self._ram_set(key, payload)

    def clear_cart(self, cart_id: str):
        key = f"cart:{cart_id}"
        if self.redis_available:
            try:
                self.redis.delete(key)
            except RedisError as e:
                self._handle_redis_error(e)
        with self._lock:
            self._memory_store.pop(key, None)

    # --- Checkout guard ---

    def acquire_checkout(self, user_id: str, ttl: int = 60) -> bool:
        """False if a checkout for this user is already in flight."""
        key = f"user:{user_id}:checkout"

        if self.redis_available:
            try:
                return bool(self.redis.set(key, "1", nx=True, ex=ttl))
            except RedisError as e:
                self._handle_redis_error(e)

        with self._lock:
            if key in self._memory_locks:
                return False
            self._memory_locks.add(key)
            return True

    def release_checkout(self, user_id: str):
        key = f"user:{user_id}:checkout"
        if self.redis_available:
            try:
                self.redis.delete(key)
            except RedisError as e:
                self._handle_redis_error(e)
        with self._lock:
            self._memory_locks.discard(key)

    # --- RAM fallback, same TTL as Redis ---

    def _ram_get(self, key: str):
        with self._lock:
            entry = self._memory_store.get(key)
            if entry is None:
                return None
            expires_at, payload = entry
            if expires_at <= self.clock():
                del self._memory_store[key]
                return None
            return payload

    def _ram_set(self, key: str, payload: dict):
        now = self.clock()
        with self._lock:
            # Drop stale carts so abandoned sessions don't pile up.
            expired = [k for k, (expires_at, _) in self._memory_store.items() if expires_at <= now]
            for k in expired:
                del self._memory_store[k]
            self._memory_store[key] = (now + self.ttl, payload)

    def _handle_redis_error(self, e):
        """Log error and switch flag to False to stop trying Redis for a while."""
        logger.error(f"❌ Redis Error: {e}. Switching to RAM mode.")
        self.redis_available = False
