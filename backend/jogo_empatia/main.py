from flask import Blueprint, jsonify
from jogo_empatia.services.kiosk import get_kiosk

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Jogo da Empatia kiosk server!'})

@main.route('/health')
def health():
    kiosk = get_kiosk()
    return jsonify({
        'status': 'ok',
        'stage': kiosk.engine.stage,
        'server': kiosk.submitter.server.base_url,
        'pending_submission': kiosk.submitter.pending is not None,
    })
