from flask import Flask
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
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = [o.strip() for o in flask_app.config.get('CORS_ORIGINS', '').split(',') if o.strip()]

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from groupplay.errors import register_error_handlers
    register_error_handlers(flask_app)

    from groupplay.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from groupplay.api.groups import groups
    flask_app.register_blueprint(groups, url_prefix='/api/groups')

    from groupplay.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    # Handlers bind to the module-level socketio instance
    from groupplay.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from groupplay.models import User
    from groupplay.services.games.rules import RULES

    flask_app.logger.info("Registered game types: %s", ', '.join(sorted(RULES)))

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from groupplay.services.users import upsert_user
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            for name in ['testuser1', 'testuser2', 'testuser3']:
                upsert_user(None, username=name, password='password')

            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
