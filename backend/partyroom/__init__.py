from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from partyroom.main import main
    flask_app.register_blueprint(main, url_prefix='/api/auth')

    from partyroom.api.rooms import rooms, sessions
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    from partyroom.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from partyroom.api.friends import friends
    flask_app.register_blueprint(friends, url_prefix='/api/friends')

    # Importing here binds the handlers to the initialized socketio instance
    from partyroom.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from partyroom.errors import PartyRoomError, UnauthenticatedError

    @flask_app.errorhandler(PartyRoomError)
    def handle_party_room_error(exc):
        if exc.status_code >= 500:
            flask_app.logger.error(f"[error] {type(exc).__name__}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    from partyroom.models import User
    from partyroom.services.accounts.identity import user_from_authorization

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.request_loader
    def load_user_from_request(request):
        return user_from_authorization(request.headers.get('Authorization'))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify(UnauthenticatedError().to_dict()), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from partyroom.services.accounts.profiles import register_user
        from partyroom.services.catalog.catalog import seed_default_games
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_default_games()

            # Seed users
            for name in ['testuser1', 'testuser2', 'testuser3']:
                register_user(f'{name}@example.com', 'password', name)
            print('Database has been reset and seeded!')

    @click.command('seed-games')
    def seed_games_command():
        """Adds the default game catalog, filling games that have no prompts."""
        from partyroom.services.catalog.catalog import seed_default_games
        with flask_app.app_context():
            changed = seed_default_games()
            print(f'Seeded {changed} game(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(seed_games_command)

    return flask_app
