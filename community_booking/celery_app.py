from celery import Celery, Task


def celery_init_app(app):
    """Bind a Celery app to the Flask app; tasks run inside an app context."""

    class FlaskTask(Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery_app = Celery(app.name, task_cls=FlaskTask)
    celery_app.config_from_object(app.config['CELERY'])

    # Celery beat schedule for periodic tasks
    celery_app.conf.beat_schedule = {
        # Delete bookings that already ended
        "expire-bookings": {
            "task": "bookings.expire_bookings",
            "schedule": app.config['EXPIRY_SWEEP_INTERVAL_SECONDS'],
            "options": {"expires": app.config['EXPIRY_SWEEP_INTERVAL_SECONDS'] * 0.8},
        },
    }

    celery_app.set_default()
    app.extensions['celery'] = celery_app

    # Registers the shared tasks on this app
    from community_booking import tasks  # noqa: F401

    return celery_app
