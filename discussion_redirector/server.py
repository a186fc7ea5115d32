from __future__ import annotations

import logging
from typing import Callable

from flask import Flask, jsonify, redirect
from flask_cors import CORS

from .config import AppConfig
from .pipeline import resolve_discussion_stream

logger = logging.getLogger(__name__)

MANIFEST = {
    "id": "org.myexampleaddon.redditlink",
    "version": "1.0.0",
    "name": "Reddit Discussion Redirector",
    "description": "Provides a direct link to the Reddit discussion for TV series episodes",
    "resources": ["stream"],
    "types": ["series"],
    "idPrefixes": ["tt"],
    "catalogs": [],
}

StreamHandler = Callable[[str, str], dict]


def create_app(config: AppConfig, stream_handler: StreamHandler | None = None) -> Flask:
    handler = stream_handler or (
        lambda content_type, stream_id: resolve_discussion_stream(content_type, stream_id, config)
    )

    app = Flask(__name__)
    CORS(app)

    @app.route("/")
    def index():
        return redirect("/manifest.json")

    @app.route("/manifest.json")
    def manifest():
        return jsonify(MANIFEST)

    @app.route("/stream/<content_type>/<stream_id>.json")
    def stream(content_type: str, stream_id: str):
        logger.info("Stream handler called with type=%s id=%s", content_type, stream_id)
        return jsonify(handler(content_type, stream_id))

    return app
