import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_flag(name, default):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'jogo_empatia.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Word tallies accumulate across every player of an event; delete the files to reset
    WORD_SCORES_DIR = os.environ.get('WORD_SCORES_DIR') or os.path.join(BASE_DIR, 'data', 'WordScores')
    # {"serverIP": "...", "serverPort": "..."}; missing file falls back to the defaults below
    SERVER_CONFIG_PATH = os.environ.get('SERVER_CONFIG_PATH') or os.path.join(BASE_DIR, 'data', 'serverconfig.json')
    LANGUAGE_FILE = os.environ.get('LANGUAGE_FILE') or os.path.join(BASE_DIR, 'jogo_empatia', 'data', 'language.json')
    DEFAULT_SERVER_IP = os.environ.get('DEFAULT_SERVER_IP', '127.0.0.1')
    DEFAULT_SERVER_PORT = os.environ.get('DEFAULT_SERVER_PORT', '3000')
    GAME_ID = int(os.environ.get('GAME_ID', '4'))
    # Bounded timeout for the single result POST (seconds)
    SUBMIT_TIMEOUT_SEC = float(os.environ.get('SUBMIT_TIMEOUT_SEC', '10'))
    # Round flow policy
    REQUIRE_MINIMUM_SELECTION = _env_flag('REQUIRE_MINIMUM_SELECTION', 'true')
    HAS_SUMMARY_CONTINUE_STEP = _env_flag('HAS_SUMMARY_CONTINUE_STEP', 'true')
    DEFAULT_LANGUAGE = os.environ.get('DEFAULT_LANGUAGE', 'pt')
    TOP_WORDS_COUNT = int(os.environ.get('TOP_WORDS_COUNT', '5'))
