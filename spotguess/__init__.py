from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import os
import click
from spotguess.config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from spotguess.main import main
    flask_app.register_blueprint(main)

    from spotguess.api.game import game
    flask_app.register_blueprint(game, url_prefix='/api')

    from spotguess.api.uploads import uploads
    flask_app.register_blueprint(uploads, url_prefix='/admin')

    # One game session lives as long as the process
    from spotguess.services.game import GameSession
    from spotguess.services.game.scheduler import ManualScheduler, RoundScheduler
    from spotguess.socketio_events import publish, register_socketio_handlers

    if flask_app.config.get('TESTING') and not flask_app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        scheduler = ManualScheduler(logger=flask_app.logger)
    else:
        scheduler = RoundScheduler(socketio, logger=flask_app.logger)
    flask_app.extensions['game_session'] = GameSession(
        config=flask_app.config,
        scheduler=scheduler,
        publish=publish,
        logger=flask_app.logger,
    )

    register_socketio_handlers()

    @click.command('clear-uploads')
    def clear_uploads_command():
        """Deletes all uploaded round images."""
        folder = flask_app.config['UPLOAD_FOLDER']
        removed = 0
        if os.path.isdir(folder):
            for name in os.listdir(folder):
                path = os.path.join(folder, name)
                if os.path.isfile(path):
                    os.remove(path)
                    removed += 1
        click.echo(f'Removed {removed} uploaded file(s).')

    flask_app.cli.add_command(clear_uploads_command)

    return flask_app
