from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import os
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

WS_NAMESPACE = '/ws'
MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'migrations')
CHANNELS_KEY = 'livetimer.channels'
TICKER_KEY = 'livetimer.ticker'
DEMO_USERS = ['testuser1', 'testuser2', 'testuser3']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db, directory=MIGRATIONS_DIR)
    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from livetimer.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Cookie token -> user for every HTTP request
    from livetimer import auth  # noqa: F401

    from livetimer.main import main
    flask_app.register_blueprint(main)

    from livetimer.api.timers import timers
    flask_app.register_blueprint(timers, url_prefix='/api/timers')

    from livetimer.formatting import format_duration, format_time
    flask_app.add_template_filter(format_duration, 'duration')
    flask_app.add_template_filter(format_time, 'clock')

    from livetimer.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    # Live connections and the progress ticker live for the whole process
    from livetimer.services.timers import ChannelManager, ConnectionRegistry, Ticker
    channels = ChannelManager(socketio, ConnectionRegistry(), namespace=WS_NAMESPACE)
    ticker = Ticker(flask_app, channels, interval_ms=flask_app.config.get('TICK_INTERVAL_MS', 1000))
    flask_app.extensions[CHANNELS_KEY] = channels
    flask_app.extensions[TICKER_KEY] = ticker

    ticker_wanted = flask_app.config.get('TICKER_ENABLED', True)
    if flask_app.config.get('TESTING') and not flask_app.config.get('ENABLE_TICKER_IN_TESTS'):
        ticker_wanted = False
    if ticker_wanted:
        ticker.start()

    @click.command('db-reset')
    @click.option('--seed', is_flag=True, help='Add demo users (password "password"). Development only.')
    @click.confirmation_option(prompt='This drops every table. Continue?')
    def db_reset_command(seed):
        """Development helper: drop and recreate all tables.

        Deployments create the schema with `flask db upgrade`.
        """
        from livetimer.models import User
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            if seed:
                for u in DEMO_USERS:
                    user = User(username=u)
                    user.set_password('password')
                    db.session.add(user)

            db.session.commit()
            print('Database has been reset' + (' and seeded!' if seed else '!'))

    flask_app.cli.add_command(db_reset_command)

    return flask_app
