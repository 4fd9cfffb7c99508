"""
App
-----
"""

import sentry_sdk
from aiohttp import web
from aiohttp_apispec import setup_aiohttp_apispec
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from cycleserver import logger
from cycleserver.config import api_root, server_mode, database_url, strict_parking, broadcast_timeout, sentry_dsn
from cycleserver.middleware import rental_error_middleware
from cycleserver.service.manager.rental_coordinator import RentalCoordinator
from cycleserver.service.manager.update_notifier import UpdateNotifier
from cycleserver.signals import register_signals
from cycleserver.version import __version__, name
from cycleserver.views import register_views, health


def build_app(db_uri=None, *, init_database=True):
    """
    Sets up the app.

    :param db_uri: The tortoise database url, defaulting to the configured one.
    :param init_database: Whether the app should connect to (and close) the database itself.
    """
    app = web.Application(middlewares=[rental_error_middleware])

    app['rental_coordinator'] = RentalCoordinator(strict_parking=strict_parking)
    app['update_notifier'] = UpdateNotifier(app['rental_coordinator'], send_timeout=broadcast_timeout)
    app['database_uri'] = db_uri if db_uri is not None else database_url

    register_signals(app, init_database=init_database)

    # register views
    register_views(app, api_root)
    app.router.add_get("/health", health)

    setup_aiohttp_apispec(
        app=app, title=name, version=__version__, url=f"{api_root}/docs",
    )

    # set up sentry exception tracking
    if server_mode != "development" and sentry_dsn:
        logger.info("Starting Sentry Logging")
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=server_mode,
            release=f"{name}@{__version__}",
            integrations=[AioHttpIntegration()]
        )

    return app
