from flask import Blueprint, jsonify, request
from jogo_empatia.services.i18n import LANGUAGES
from jogo_empatia.services.kiosk import emit_to_kiosk, get_kiosk


i18n = Blueprint('i18n', __name__)


@i18n.route('/<string:section>/<string:key>', methods=['GET'])
def get_text(section, key):
    # Format variables arrive as ?vars=1&vars=foo and fill {0}, {1}, ...
    variables = request.args.getlist('vars')
    localizer = get_kiosk().localizer
    return jsonify({
        'section': section,
        'key': key,
        'language': localizer.language,
        'text': localizer.get(section, key, *variables),
    })


@i18n.route('/<string:section>', methods=['GET'])
def get_section(section):
    localizer = get_kiosk().localizer
    return jsonify({'language': localizer.language, 'texts': localizer.section(section)})


@i18n.route('/language', methods=['POST'])
def set_language():
    data = request.get_json(silent=True) or {}
    localizer = get_kiosk().localizer
    if data.get('toggle'):
        localizer.toggle_language()
    else:
        language = str(data.get('language') or '').lower()
        if language not in LANGUAGES:
            return jsonify({'error': f'language must be one of {list(LANGUAGES)}'}), 400
        localizer.set_language(language)
    emit_to_kiosk('language_changed', {'language': localizer.language})
    return jsonify({'language': localizer.language})
