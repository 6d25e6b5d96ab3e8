import click
from flask import Flask

from stash.api import api_bp
from stash.config import Config
from stash.extensions import db, migrate
from stash.models import User
from stash.schema_migrations import migrate_add_user_id_column
from stash.services.security import ensure_admin_user


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(api_bp)

    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        migrate_add_user_id_column()
        print("Initialized Stash database.")

    @app.cli.command("create-user")
    @click.argument("username")
    @click.password_option()
    def create_user_command(username, password):
        if User.query.filter_by(username=username).first():
            raise click.ClickException(f"User {username!r} already exists.")
        user = User(username=username, is_active=True)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        print(f"Created user {username}.")

    with app.app_context():
        db.create_all()
        admin = ensure_admin_user(
            app.config["ADMIN_USERNAME"], app.config["ADMIN_PASSWORD"]
        )
        if admin is not None:
            app.logger.warning(
                "Created admin user %r; change ADMIN_PASSWORD in production.",
                admin.username,
            )
        migrate_add_user_id_column()

    return app
