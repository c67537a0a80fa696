"""Flask application factory for the ClipSmith JSON API."""

from pathlib import Path

from flask import Flask, jsonify

from clipsmith.engine import DEFAULT_OUTPUT_DIR
from clipsmith.errors import ClipError


def create_app(output_dir: Path | None = None) -> Flask:
    app = Flask(__name__)
    app.config["OUTPUT_DIR"] = Path(output_dir or DEFAULT_OUTPUT_DIR)

    from clipsmith.web.routes import bp
    app.register_blueprint(bp)

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({"error": error.description}), 400

    @app.errorhandler(ClipError)
    def clip_error(error):
        return jsonify({"error": str(error)}), 400

    return app
