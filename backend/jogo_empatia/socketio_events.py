from flask_socketio import join_room, leave_room, emit
from flask import current_app
from jogo_empatia import socketio
from jogo_empatia.services.kiosk import KIOSK_ROOM, NAMESPACE, get_kiosk


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_kiosk(data=None):
    # Kiosk screens and the card reader bridge share one room
    join_room(KIOSK_ROOM)
    emit('joined', {'room': KIOSK_ROOM})


def handle_leave_kiosk(data=None):
    leave_room(KIOSK_ROOM)
    emit('left', {'room': KIOSK_ROOM})


def handle_nfc_read(data):
    """Card reader bridge event: ``{"nfc_id": "...", "reader": "..."}``."""
    nfc_id = str((data or {}).get('nfc_id') or '').strip()
    reader = str((data or {}).get('reader') or '')
    if not nfc_id:
        emit('error', {'message': 'nfc_id is required'})
        return
    dispatched = get_kiosk().submitter.on_external_identifier_received(nfc_id, reader)
    current_app.logger.info(f"[nfc-socket] card={nfc_id} reader={reader or '-'} dispatched={dispatched}")
    emit('nfc_ack', {'nfc_id': nfc_id, 'dispatched': dispatched})


def handle_card_removed(data=None):
    current_app.logger.info('[nfc-socket] card removed')


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = [NAMESPACE, '/'] if testing else [NAMESPACE]
    for ns in namespaces:
        socketio.on_event('connect', handle_connect, namespace=ns)
        socketio.on_event('join_kiosk', handle_join_kiosk, namespace=ns)
        socketio.on_event('leave_kiosk', handle_leave_kiosk, namespace=ns)
        socketio.on_event('nfc_read', handle_nfc_read, namespace=ns)
        socketio.on_event('nfc_removed', handle_card_removed, namespace=ns)
        socketio.on_event('ping', handle_ping, namespace=ns)
