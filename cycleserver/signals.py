"""
Signals
-------

Defines a number of signals that the aiohttp server uses
to set up and tear down the database and observer sockets.

Each signal must accept an the ``app`` argument.
"""
from aiohttp.abc import Application
from tortoise.contrib.aiohttp import register_tortoise

from cycleserver import logger

MODELS = {'models': ['cycleserver.models']}
"""The tortoise app configuration of the models."""


async def close_observer_connections(app: Application):
    """Closes all outstanding connections between the dashboards and the server."""
    await app['update_notifier'].close_connections()


def register_signals(app, init_database=True):
    """
    Registers all the signals at the appropriate hooks.

    The database is opened (and its schema generated) on startup
    and closed again on cleanup through tortoise's own integration.
    """
    if init_database:
        logger.info("Connecting to the database")
        register_tortoise(app, db_url=app['database_uri'], modules=MODELS, generate_schemas=True)

    app.on_shutdown.append(close_observer_connections)
