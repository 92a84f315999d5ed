#!/usr/bin/env python3
"""
CampusDesk - College Dashboard Backend
======================================
Run: python3 -m campusdesk.app
Then point the dashboard at: http://localhost:3000
"""
import atexit
import logging
import secrets

from flask import Flask, jsonify
from flask_cors import CORS

from campusdesk.auth import init_auth
from campusdesk.config import Config, DEBUG, HOST, LOG_FORMAT, LOG_LEVEL, PORT
from campusdesk.repository import InMemoryRepository, seed_demo_data
from campusdesk.routes import register_routes
from campusdesk.services.ai_service import TextGenerationClient
from campusdesk.services.auto_publish import AutoPublisher

logger = logging.getLogger(__name__)


def create_app(overrides=None, repository=None, text_client=None):
    """
    Build the Flask app.

    `overrides` is applied on top of the environment config (see Config.update).
    `repository` and `text_client` replace the defaults, mainly for tests.
    """
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    settings = Config()
    settings.update(overrides or {})

    if not settings.jwt_secret:
        if not settings.demo_mode:
            raise RuntimeError('CAMPUSDESK_JWT_SECRET not configured')
        # Demo tokens only need to outlive this process
        settings.jwt_secret = secrets.token_hex(32)
        logger.warning("CAMPUSDESK_JWT_SECRET not set; using a random secret for this run")

    if repository is None:
        repository = InMemoryRepository()
        if settings.seed_demo_data:
            seed_demo_data(repository)

    app = Flask(__name__)
    CORS(app)

    app.extensions["campusdesk"] = {
        "settings": settings,
        "repository": repository,
        "text_client": text_client or TextGenerationClient.from_config(settings),
        "auto_publisher": None,
    }

    # Auth hook goes in before the blueprints
    init_auth(app)
    register_routes(app)

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    if settings.auto_publish:
        auto_publisher = AutoPublisher(repository, settings.auto_publish_interval_seconds)
        auto_publisher.start()
        app.extensions["campusdesk"]["auto_publisher"] = auto_publisher
        atexit.register(auto_publisher.stop, 1.0)

    return app


def main():
    app = create_app()
    print()
    print("+" + "=" * 50 + "+")
    print("|  CampusDesk - College Dashboard Backend          |")
    print("+" + "=" * 50 + "+")
    print("|                                                  |")
    print(f"|  API: http://localhost:{PORT:<26}|")
    print("|                                                  |")
    print("|  Press Ctrl+C to stop                            |")
    print("+" + "=" * 50 + "+")
    print()
    app.run(host=HOST, port=PORT, debug=DEBUG, use_reloader=False)


if __name__ == '__main__':
    main()
