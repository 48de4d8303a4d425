import logging
import secrets
import threading
from typing import Callable, Dict, List, Optional

from takeaway.domain.errors import AuthRequired
from takeaway.domain.schemas import UserProfile

logger = logging.getLogger(__name__)

# (event, user) where event is "signed_in" or "signed_out"
SessionListener = Callable[[str, Optional[UserProfile]], None]


class SessionProvider:
    """
    Process-wide auth session state.

    Sign-in itself belongs to the external identity provider, which hands
    the resulting user to `sign_in`. Everything else reads through here.
    Components receive the provider explicitly (app.state.sessions).
    """

    def __init__(self):
        self._sessions: Dict[str, UserProfile] = {}
        self._listeners: List[SessionListener] = []
        self._lock = threading.Lock()
        self.started = False

    def start(self):
        self.started = True
        logger.info("✅ SessionProvider started")

    def stop(self):
        with self._lock:
            self._listeners.clear()
            self._sessions.clear()
        self.started = False
        logger.info("SessionProvider stopped")

    def sign_in(self, user: UserProfile) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._sessions[token] = user
        self._notify("signed_in", user)
        return token

    def get_user(self, token: Optional[str]) -> Optional[UserProfile]:
        if not token:
            return None
        with self._lock:
            return self._sessions.get(token)

    def require_user(self, token: Optional[str]) -> UserProfile:
        user = self.get_user(token)
        if user is None:
            raise AuthRequired()
        return user

    def sign_out(self, token: Optional[str]):
        with self._lock:
            user = self._sessions.pop(token, None) if token else None
        if user:
            self._notify("signed_out", user)

    def on_change(self, callback: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, event: str, user: Optional[UserProfile]):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, user)
            except Exception as e:
                logger.error(f"❌ Session listener failed on {event}: {e}", exc_info=True)
