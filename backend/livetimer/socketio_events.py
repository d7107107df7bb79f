from flask import current_app, request
from flask_socketio import ConnectionRefusedError

from livetimer import socketio, WS_NAMESPACE, CHANNELS_KEY
from livetimer.auth import resolve, token_from_request
from livetimer.services.timers import ACTIVE_TIMERS, ALL_TIMERS


def _channels():
    return current_app.extensions[CHANNELS_KEY]


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    """Authenticate from the handshake cookie, then register and push state.

    Refusing here rejects the connection before the client gets any event.
    """
    user = resolve(token_from_request())
    if user is None:
        current_app.logger.info(f"[ws-refused] sid={_get_sid()} no valid session")
        raise ConnectionRefusedError('unauthorized')
    current_app.logger.info(f"[ws-connect] user={user.username} sid={_get_sid()}")
    _channels().register(user, _get_sid())


def handle_disconnect(reason=None):
    sid = _get_sid()
    channels = _channels()
    user_id = channels.registry.user_for(sid)
    if user_id is None:
        return
    channels.unregister(user_id, sid)
    current_app.logger.info(f"[ws-disconnect] user_id={user_id} sid={sid} reason={reason}")


def _relay(kind, data):
    user = resolve(token_from_request())
    if user is None:
        current_app.logger.info(f"[relay-drop] sid={_get_sid()} session no longer valid")
        return
    message = data.get('message') if isinstance(data, dict) else data
    _channels().relay(kind, message, user.username)


def handle_all_timers(data=None):
    _relay(ALL_TIMERS, data)


def handle_active_timers(data=None):
    _relay(ACTIVE_TIMERS, data)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the live timer namespace."""
    socketio.on_event('connect', handle_connect, namespace=WS_NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=WS_NAMESPACE)
    socketio.on_event(ALL_TIMERS, handle_all_timers, namespace=WS_NAMESPACE)
    socketio.on_event(ACTIVE_TIMERS, handle_active_timers, namespace=WS_NAMESPACE)
