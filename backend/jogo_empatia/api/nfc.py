from flask import Blueprint, jsonify, request
from jogo_empatia.services.kiosk import get_kiosk


nfc = Blueprint('nfc', __name__)


@nfc.route('/tap', methods=['POST'])
def card_tapped():
    """Entry point for the card reader bridge: a card id was presented."""
    data = request.get_json(silent=True) or {}
    nfc_id = str(data.get('nfc_id') or '').strip()
    reader = str(data.get('reader') or '')
    if not nfc_id:
        return jsonify({'error': 'nfc_id is required'}), 400

    kiosk = get_kiosk()
    dispatched = kiosk.submitter.on_external_identifier_received(nfc_id, reader)
    if not dispatched:
        return jsonify({'dispatched': False, 'message': 'No game result pending'}), 202
    return jsonify({
        'dispatched': True,
        'nfc_id': nfc_id,
        'result': kiosk.last_result,
    })


@nfc.route('/status', methods=['GET'])
def submitter_status():
    submitter = get_kiosk().submitter
    pending = submitter.pending
    return jsonify({
        'server': submitter.server.base_url,
        'game_id': submitter.game_id,
        'pending': pending.scores.to_dict() if pending else None,
        'last_nfc_id': submitter.last_external_id,
    })
