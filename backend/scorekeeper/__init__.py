from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
import logging
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    logging.basicConfig(
        level=flask_app.config.get('LOG_LEVEL', 'INFO'),
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    )

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Title numbering lives with the app so each app (and each test) counts on its own
    from scorekeeper.services.games.numbering import DailySequence
    flask_app.extensions['daily_sequence'] = DailySequence()

    # Import and register blueprints here
    from scorekeeper.main import main
    flask_app.register_blueprint(main)

    from scorekeeper.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from scorekeeper.api.players import players
    flask_app.register_blueprint(players, url_prefix='/api/players')

    # Register Socket.IO event handlers
    from scorekeeper.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Flask-Login user loader
    from scorekeeper.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Not authenticated'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database with the initial admin."""
        from scorekeeper.auth import ensure_default_admin
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            flask_app.extensions['daily_sequence'].reset()
            admin = ensure_default_admin()
            print(f'Database has been reset and seeded! Admin login: {admin.username}')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
