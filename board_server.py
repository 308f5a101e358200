#!/usr/bin/env python3
"""
Placement Tracker Board Server
------------------------------
JSON API for the drag-and-drop board UI, backed by a PlacementTracker.

Usage:
    python board_server.py
    python board_server.py --config config/tracker.yaml --port 3000

API:
    GET    /health
    GET    /api/stages                    → { stages: [{id, title}] }
    GET    /api/session                   → { user }
    POST   /api/signup                    → { name, email, password, college, branch }
    POST   /api/login                     → { email, password }
    POST   /api/logout
    GET    /api/board                     → { columns, stats, user }
    POST   /api/applications              → { company, role, package, description, status }
    PUT    /api/applications/<id>         → any editable fields
    DELETE /api/applications/<id>
    POST   /api/applications/<id>/move    → { status }
    POST   /api/drag/start                → { active_id }
    POST   /api/drag/end                  → { active_id, over_id }
"""

import argparse
import logging
import os
import sys
from functools import wraps

from flask import Flask, jsonify, request

from pkg.placement.config import Config
from pkg.placement.errors import (
    AuthError,
    DuplicateUserError,
    InvalidStageError,
    NotFoundError,
    StorageError,
    TrackerError,
    ValidationError,
)
from pkg.placement.schema import Stage
from pkg.placement.tracker import PlacementTracker

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    InvalidStageError: 400,
    AuthError: 401,
    NotFoundError: 404,
    DuplicateUserError: 409,
    StorageError: 500,
}


def create_app(tracker: PlacementTracker) -> Flask:
    """Build the Flask app around one tracker instance."""
    app = Flask(__name__)
    app.config["TRACKER"] = tracker

    @app.errorhandler(TrackerError)
    def handle_tracker_error(e):
        code = ERROR_STATUS.get(type(e), 400)
        logger.info(f"{request.method} {request.path} → {code}: {e}")
        return jsonify({"error": str(e), "type": type(e).__name__}), code

    def require_session(f):
        """Decorator: reject requests when nobody is logged in."""
        @wraps(f)
        def decorated(*args, **kwargs):
            if not tracker.session.is_authenticated:
                return jsonify({"error": "Not logged in"}), 401
            return f(*args, **kwargs)
        return decorated

    def body() -> dict:
        data = request.get_json(force=True, silent=True)
        return data if isinstance(data, dict) else {}

    def user_json():
        return tracker.session.user.to_dict() if tracker.session.user else None

    # ── Session ──────────────────────────────────────────────────────────

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "session": tracker.session.state.value})

    @app.route("/api/stages")
    def api_stages():
        return jsonify({"stages": [{"id": s.value, "title": s.label} for s in Stage]})

    @app.route("/api/session")
    def api_session():
        return jsonify({"user": user_json()})

    @app.route("/api/signup", methods=["POST"])
    def api_signup():
        data = body()
        user = tracker.session.signup(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            college=data.get("college", ""),
            branch=data.get("branch", ""),
        )
        return jsonify({"user": user.to_dict()}), 201

    @app.route("/api/login", methods=["POST"])
    def api_login():
        data = body()
        user = tracker.session.login(data.get("email", ""), data.get("password", ""))
        return jsonify({"user": user.to_dict()})

    @app.route("/api/logout", methods=["POST"])
    def api_logout():
        tracker.session.logout()
        return jsonify({"user": None})

    # ── Board ────────────────────────────────────────────────────────────

    @app.route("/api/board")
    @require_session
    def api_board():
        columns = [
            {
                "id": stage.value,
                "title": stage.label,
                "applications": [a.to_dict() for a in apps],
            }
            for stage, apps in tracker.store.board().items()
        ]
        active = tracker.resolver.active
        return jsonify({
            "columns": columns,
            "stats": tracker.store.stats(),
            "user": user_json(),
            "active": active.to_dict() if active else None,
        })

    @app.route("/api/applications", methods=["POST"])
    @require_session
    def api_create_application():
        application = tracker.store.create(body())
        return jsonify({"application": application.to_dict()}), 201

    @app.route("/api/applications/<app_id>", methods=["PUT"])
    @require_session
    def api_update_application(app_id):
        application = tracker.store.update(app_id, body())
        return jsonify({"application": application.to_dict()})

    @app.route("/api/applications/<app_id>", methods=["DELETE"])
    @require_session
    def api_delete_application(app_id):
        tracker.store.delete(app_id)
        return jsonify({"deleted": app_id})

    @app.route("/api/applications/<app_id>/move", methods=["POST"])
    @require_session
    def api_move_application(app_id):
        status = body().get("status")
        if not status:
            return jsonify({"error": "status is required"}), 400
        application = tracker.store.move(app_id, status)
        return jsonify({"application": application.to_dict()})

    # ── Drag and drop ────────────────────────────────────────────────────

    @app.route("/api/drag/start", methods=["POST"])
    @require_session
    def api_drag_start():
        active = tracker.resolver.drag_start(body().get("active_id", ""))
        return jsonify({"active": active.to_dict() if active else None})

    @app.route("/api/drag/end", methods=["POST"])
    @require_session
    def api_drag_end():
        data = body()
        moved = tracker.resolver.drag_end(data.get("active_id", ""), data.get("over_id"))
        return jsonify({
            "moved": moved is not None,
            "application": moved.to_dict() if moved else None,
        })

    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Placement Tracker Board Server")
    parser.add_argument("--config", default=None, help="Path to tracker.yaml")
    parser.add_argument("--host", default=None,
                        help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--db", help="Path to tracker.db (overrides PLACEMENT_TRACKER_DB env var)")
    args = parser.parse_args()

    if args.db:
        os.environ["PLACEMENT_TRACKER_DB"] = args.db

    cfg = Config.load(args.config)
    host = args.host or cfg.host
    port = args.port or cfg.port

    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s [tracker] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    tracker = PlacementTracker.from_config(cfg)
    logger.info(f"Storage: {cfg.storage_backend} ({cfg.db_path})")
    if tracker.session.user:
        logger.info(f"Restored session for {tracker.session.user.email}")

    app = create_app(tracker)
    # Single board, single writer: no threaded request handling
    app.run(host=host, port=port, debug=False, threaded=False)


if __name__ == "__main__":
    main()
