from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = [o.strip() for o in str(flask_app.config.get('CORS_ORIGINS') or '').split(',') if o.strip()]
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per app: every live room for this process
    from gameshow.hub import SocketIOHub
    from gameshow.models import GameSettings
    from gameshow.question_bank import QuestionBank
    from gameshow.services.games.registry import SessionRegistry
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    hub = SocketIOHub(socketio, namespace=namespace)
    flask_app.extensions['gameshow_registry'] = SessionRegistry(hub, GameSettings.from_config(flask_app.config))
    flask_app.extensions['question_bank'] = QuestionBank(flask_app.config.get('QUESTION_BANK_PATH'))

    # Import and register blueprints here
    from gameshow.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from gameshow.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    @click.command('questions-check')
    def questions_check_command():
        """Loads the question bank and lists its categories."""
        from gameshow.errors import QuestionBankUnavailable
        bank = flask_app.extensions['question_bank']
        try:
            categories = bank.categories()
        except QuestionBankUnavailable as exc:
            raise click.ClickException(f'Question bank unavailable: {bank.path}') from exc
        for name, size in sorted(categories.items()):
            click.echo(f'{name}: {size}')

    flask_app.cli.add_command(questions_check_command)

    return flask_app
