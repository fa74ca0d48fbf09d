import logging
import click
from flask import Flask
from community_booking.celery_app import celery_init_app
from community_booking.config import DevelopmentConfig
from community_booking.extensions import db, migrate
from community_booking.services.resource_catalog import ResourceCatalog


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger('community_booking').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_class=DevelopmentConfig, config_overrides=None):
    app = Flask(__name__)
    app.config.from_object(config_class)
    if config_overrides:
        app.config.update(config_overrides)

    _configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    app.extensions['resource_catalog'] = ResourceCatalog.from_config(app.config['RESOURCE_CATALOG'])

    # Register Blueprints
    from community_booking.api.routes.resources import resources_bp
    from community_booking.api.routes.bookings import bookings_bp
    from community_booking.api.routes.main import main_bp

    app.register_blueprint(resources_bp, url_prefix='/api/resources')
    app.register_blueprint(bookings_bp, url_prefix='/api/bookings')
    app.register_blueprint(main_bp)

    _register_commands(app)

    # Expired bookings are swept by celery beat (see tasks.py)
    celery_init_app(app)

    app.logger.info("Loaded %d bookable resources", len(app.extensions['resource_catalog']))
    return app


def _register_commands(app):
    @app.cli.command('init-db')
    def init_db():
        """Create the booking tables (use `flask db upgrade` once migrations exist)."""
        db.create_all()
        click.echo("Database initialised.")

    @app.cli.command('expire-bookings')
    def expire_bookings():
        """Run a single expiry sweep now."""
        from community_booking.tasks import expire_bookings as expire_bookings_task
        removed = expire_bookings_task.apply().get()
        if removed is None:
            raise click.ClickException("Expiry sweep failed, see the log for details.")
        click.echo(f"{removed} expired booking(s) removed.")
