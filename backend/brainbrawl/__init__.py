from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

EXTENSION_KEY = 'brainbrawl'


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from brainbrawl.services.games.broadcaster import Broadcaster
    from brainbrawl.services.games.manager import GameManager
    from brainbrawl.services.games.scheduler import StageScheduler
    from brainbrawl.services.games.settings import GameSettings

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')

    def emit(event, payload, to):
        # Called from handlers and background timers alike
        socketio.emit(event, payload, to=to, namespace=namespace)

    settings = GameSettings.from_config(flask_app.config)
    flask_app.extensions[EXTENSION_KEY] = GameManager(
        settings,
        Broadcaster(emit, logger=flask_app.logger),
        StageScheduler(socketio.start_background_task, socketio.sleep, logger=flask_app.logger),
        logger=flask_app.logger,
    )

    from brainbrawl.routes import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from brainbrawl.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    @click.command('show-features')
    def show_features_command():
        """Prints the feature toggles and match rules in effect."""
        public = settings.public()
        click.echo('Features enabled:')
        for feature, enabled in public['features'].items():
            click.echo(f"  {feature}: {'on' if enabled else 'off'}")
        click.echo('Match rules:')
        for key, value in public['game'].items():
            click.echo(f"  {key}: {value}")

    flask_app.cli.add_command(show_features_command)

    return flask_app
