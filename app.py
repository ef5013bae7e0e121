#!/usr/bin/env python3
"""
Run script for the field operations service
"""

import argparse
import os
import sys

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from app import create_app, get_operations
from app.build import build_database
from app.utils.logger import get_logger

logger = get_logger("field_ops.run")


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='Field Operations Service')
    parser.add_argument('--build-only', action='store_true',
                        help='Create tables (and seed data unless disabled), then exit without starting the server')
    parser.add_argument('--no-seed-data', action='store_false', dest='seed_data', default=True,
                        help='Do not insert the demo hierarchy, catalog, users and stock')
    parser.add_argument('--no-sync', action='store_false', dest='sync', default=True,
                        help='Do not start the periodic requisition sync')
    return parser.parse_args()


def main():
    args = parse_arguments()
    app = create_app()

    build_database(app, seed=args.seed_data)

    if args.build_only:
        logger.info("Build completed. Exiting without starting web server.")
        sys.exit(0)

    if args.sync and app.config['SYNC_ENABLED']:
        with app.app_context():
            get_operations(app).sync_coordinator.start()

    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')
    host = os.environ.get('FLASK_HOST', '127.0.0.1')
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode})")
    # The reloader would run a second process with its own sync thread
    app.run(debug=debug_mode, host=host, port=port, use_reloader=False)


if __name__ == '__main__':
    main()
