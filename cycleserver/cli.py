"""
The entry point for the CLI tool

.. code:: bash

    cycleserver              # serve the api (same as ``cycleserver serve``)
    cycleserver seed         # fill an empty database with sample data
    cycleserver seed --clear # replace everything with the sample data
"""

import argparse
import asyncio

import uvloop
from aiohttp import web

from cycleserver import logger
from cycleserver.app import build_app
from cycleserver.config import database_url, port
from cycleserver.seed import seed
from cycleserver.version import __version__, name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=name, description="Campus cycle booth server.")
    parser.add_argument(
        "--database-url", default=database_url,
        help="The tortoise database url (default: the DATABASE_URL env var)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve = subparsers.add_parser("serve", help="Run the api server")
    serve.add_argument("--port", type=int, default=port, help="The port to serve on (default: the PORT env var)")

    seed_parser = subparsers.add_parser("seed", help="Fill the database with sample booths, units and cycles")
    seed_parser.add_argument("--clear", action="store_true", help="Remove all existing data first")

    return parser


def run(argv=None):
    """Installs uvloop and runs the requested command, serving the app by default."""
    args = build_parser().parse_args(argv)
    uvloop.install()

    if args.command == "seed":
        asyncio.run(seed(args.database_url, clear=args.clear))
        return

    logger.info(f'Starting {name} %s!', __version__)
    web.run_app(build_app(args.database_url), port=getattr(args, "port", port))


if __name__ == '__main__':
    run()
