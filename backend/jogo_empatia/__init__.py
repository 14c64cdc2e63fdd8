from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import json
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Result ledger table; migrations handle later schema changes
    from jogo_empatia import models  # noqa: F401
    with flask_app.app_context():
        db.create_all()

    # Game services are built once per app and shared by routes and socket handlers
    from jogo_empatia.services.kiosk import EXTENSION_KEY, build_kiosk
    kiosk = build_kiosk(flask_app)
    flask_app.extensions[EXTENSION_KEY] = kiosk

    # Import and register blueprints here
    from jogo_empatia.main import main
    flask_app.register_blueprint(main)

    from jogo_empatia.api.game import game
    flask_app.register_blueprint(game, url_prefix='/api/game')

    from jogo_empatia.api.nfc import nfc
    flask_app.register_blueprint(nfc, url_prefix='/api/nfc')

    from jogo_empatia.api.i18n import i18n
    flask_app.register_blueprint(i18n, url_prefix='/api/i18n')

    # Register Socket.IO event handlers
    from jogo_empatia.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the result ledger tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('scores-reset')
    def scores_reset_command():
        """Deletes the persisted word tallies of all three rounds."""
        kiosk.store.reset_all()
        print(f'Word scores deleted from {kiosk.store.folder}')

    @click.command('scores-show')
    def scores_show_command():
        """Prints the persisted word tallies of every round."""
        for round_number, data in kiosk.store.dump_all().items():
            print(f'--- Round {round_number} ---')
            print(json.dumps(data, ensure_ascii=False, indent=2) if data is not None else '(no file)')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(scores_reset_command)
    flask_app.cli.add_command(scores_show_command)

    return flask_app
