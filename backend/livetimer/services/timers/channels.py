import threading
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app

from livetimer import db
from livetimer.models import Timer, User

ALL_TIMERS = 'all_timers'
ACTIVE_TIMERS = 'active_timers'
MESSAGE_KINDS = (ALL_TIMERS, ACTIVE_TIMERS)


class ConnectionRegistry:
    """Thread-safe map of user id -> live Socket.IO sid.

    At most one sid is tracked per user; registering again replaces the
    previous entry.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sid_by_user: Dict[int, str] = {}
        self._user_by_sid: Dict[str, int] = {}

    def register(self, user_id: int, sid: str) -> Optional[str]:
        """Store the mapping and return the sid it replaced, if any."""
        with self._lock:
            previous = self._sid_by_user.get(user_id)
            if previous is not None:
                self._user_by_sid.pop(previous, None)
            self._sid_by_user[user_id] = sid
            self._user_by_sid[sid] = user_id
            return previous

    def unregister(self, user_id: int, sid: Optional[str] = None) -> bool:
        # With a sid, only drop the entry if it still points at that connection
        with self._lock:
            current = self._sid_by_user.get(user_id)
            if current is None or (sid is not None and current != sid):
                return False
            del self._sid_by_user[user_id]
            self._user_by_sid.pop(current, None)
            return True

    def get(self, user_id: int) -> Optional[str]:
        with self._lock:
            return self._sid_by_user.get(user_id)

    def user_for(self, sid: str) -> Optional[int]:
        with self._lock:
            return self._user_by_sid.get(sid)

    def items(self) -> List[Tuple[int, str]]:
        with self._lock:
            return list(self._sid_by_user.items())

    def __len__(self):
        with self._lock:
            return len(self._sid_by_user)

    def __contains__(self, user_id):
        with self._lock:
            return user_id in self._sid_by_user


class ChannelManager:
    """Pushes timer snapshots to registered connections.

    Sends are best effort: a failed emit is logged and dropped, never
    retried or buffered.
    """

    def __init__(self, socketio, registry: Optional[ConnectionRegistry] = None, namespace: str = '/ws'):
        self.socketio = socketio
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.namespace = namespace

    def register(self, user: User, sid: str) -> None:
        previous = self.registry.register(user.id, sid)
        if previous and previous != sid:
            current_app.logger.info(f"[ws-replace] user={user.username} old_sid={previous} new_sid={sid}")
        self.push_full_state(user, sid)

    def unregister(self, user_id: int, sid: Optional[str] = None) -> bool:
        return self.registry.unregister(user_id, sid)

    def push_full_state(self, user: User, sid: str) -> bool:
        timers = Timer.for_owner(user.username)
        return self._send(sid, ALL_TIMERS, {
            'type': ALL_TIMERS,
            'timers': [t.to_dict() for t in timers],
        })

    def broadcast_all(self) -> int:
        """Push all_timers and active_timers to every registered connection.

        Returns the number of connections whose snapshot could be built.
        """
        reached = 0
        for user_id, sid in self.registry.items():
            try:
                user = db.session.get(User, user_id)
                if user is None:
                    raise LookupError(f'no user with id {user_id}')
                views = [t.to_dict() for t in Timer.for_owner(user.username)]
            except Exception:
                db.session.rollback()
                current_app.logger.exception(f"[broadcast-skip] user_id={user_id} sid={sid}")
                continue
            self._send(sid, ALL_TIMERS, {'type': ALL_TIMERS, 'timers': views})
            self._send(sid, ACTIVE_TIMERS, {
                'type': ACTIVE_TIMERS,
                'timers': [v for v in views if v['isActive']],
            })
            reached += 1
        return reached

    def relay(self, kind: str, message: Any, username: str) -> int:
        """Echo a client payload, tagged with its sender, to every connection."""
        if kind not in MESSAGE_KINDS:
            raise ValueError(f'unknown message type: {kind}')
        payload = {'type': kind, 'message': message, 'name': username}
        sent = 0
        for _user_id, sid in self.registry.items():
            if self._send(sid, kind, payload):
                sent += 1
        current_app.logger.info(f"[relay] kind={kind} from={username} delivered={sent}")
        return sent

    def _send(self, sid: str, kind: str, payload: Dict[str, Any]) -> bool:
        try:
            self.socketio.emit(kind, payload, to=sid, namespace=self.namespace)
            return True
        except Exception:
            current_app.logger.exception(f"[push-failed] sid={sid} kind={kind}")
            return False
