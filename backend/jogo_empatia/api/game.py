from flask import Blueprint, jsonify, request, current_app
from jogo_empatia.services.game.rounds import EmptySelection, GameFlowError
from jogo_empatia.services.kiosk import emit_to_kiosk, get_kiosk


game = Blueprint('game', __name__)


def _flow_error(exc: GameFlowError):
    code = 'empty_selection' if isinstance(exc, EmptySelection) else 'invalid_transition'
    current_app.logger.info(f"[game-flow] rejected: {exc}")
    return jsonify({'error': str(exc), 'code': code}), 409


def _state_changed(kiosk):
    state = kiosk.state()
    emit_to_kiosk('state_update', {'stage': state['stage'], 'round_number': state['round_number']})
    return state


@game.route('/start', methods=['POST'])
def start_game():
    kiosk = get_kiosk()
    kiosk.start_game()
    return jsonify(_state_changed(kiosk)), 201


@game.route('/state', methods=['GET'])
def get_state():
    return jsonify(get_kiosk().state())


@game.route('/select', methods=['POST'])
def toggle_word():
    data = request.get_json(silent=True) or {}
    index = data.get('index')
    if isinstance(index, bool) or not isinstance(index, int):
        return jsonify({'error': 'index must be an integer'}), 400

    kiosk = get_kiosk()
    try:
        changed = kiosk.toggle_selection(index)
    except GameFlowError as exc:
        return _flow_error(exc)
    payload = kiosk.state()
    payload['changed'] = changed
    return jsonify(payload)


@game.route('/confirm', methods=['POST'])
def confirm_round():
    kiosk = get_kiosk()
    try:
        outcome = kiosk.confirm_round()
    except GameFlowError as exc:
        return _flow_error(exc)
    payload = _state_changed(kiosk)
    payload['round_result'] = {
        'round_number': outcome.round_index + 1,
        'round_score': outcome.round_score,
        'selected_words': outcome.selected_words,
        'completed': outcome.completed,
    }
    return jsonify(payload)


@game.route('/continue', methods=['POST'])
def continue_round():
    kiosk = get_kiosk()
    try:
        outcome = kiosk.continue_round()
    except GameFlowError as exc:
        return _flow_error(exc)
    payload = _state_changed(kiosk)
    payload['round_result'] = {
        'round_number': outcome.round_index + 1,
        'round_score': outcome.round_score,
        'selected_words': outcome.selected_words,
        'completed': outcome.completed,
    }
    return jsonify(payload)


@game.route('/result', methods=['GET'])
def get_result():
    kiosk = get_kiosk()
    if kiosk.last_result is None:
        return jsonify({'error': 'No finished game yet'}), 404
    return jsonify(kiosk.last_result)


@game.route('/words/top', methods=['GET'])
def get_top_words():
    kiosk = get_kiosk()
    n = request.args.get('n', default=kiosk.top_words_count, type=int)
    if n is None or n < 0:
        return jsonify({'error': 'n must be a non-negative integer'}), 400
    return jsonify([{'text': w, 'points': p} for w, p in kiosk.cloud.top_words(n)])


@game.route('/words/cloud', methods=['GET'])
def get_word_cloud():
    return jsonify(get_kiosk().cloud.display_weights())
