from flask import current_app, request
from flask_socketio import emit

from brainbrawl import socketio
from brainbrawl.messages import INTENT_MODELS, DisconnectIntent, parse_intent
from brainbrawl.routes import get_manager


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect():
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(*args):
    get_manager().handle(_get_sid(), DisconnectIntent())


def _intent_handler(event: str):
    def handler(data=None):
        intent = parse_intent(event, data)
        if intent is None:
            current_app.logger.debug(f"[reject] sid={_get_sid()} malformed {event} payload={data!r}")
            return
        get_manager().handle(_get_sid(), intent)
    handler.__name__ = f"handle_{event.replace(':', '_')}"
    return handler


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the game namespace.

    Every inbound intent event shares one handler shape: parse the payload,
    drop it if it fails validation, then hand it to the game manager.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for event in INTENT_MODELS:
        socketio.on_event(event, _intent_handler(event), namespace=namespace)
