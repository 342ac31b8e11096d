from typing import Callable, Optional

from flask import Flask, jsonify, redirect, url_for

from src.agents.architect_agent import get_blueprint
from src.agents.architect_agent.llm import ModelClient
from src.agents.architect_agent.routes import CLIENT_EXTENSION, GENERATOR_EXTENSION, SETTINGS_KEY
from src.config import Settings, load_settings
from src.logging_utils import setup_logging


def create_app(
    settings: Optional[Settings] = None,
    model_client: Optional[ModelClient] = None,
    generator: Optional[Callable] = None,
) -> Flask:
    """Build the Flask app.

    ``model_client`` and ``generator`` override the configured model provider
    and the python-pptx generator (tests inject fakes here).
    """
    settings = settings or load_settings()
    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config[SETTINGS_KEY] = settings
    # multipart overhead on top of the template limit
    app.config["MAX_CONTENT_LENGTH"] = settings.max_template_bytes + 1024 * 1024
    if model_client is not None:
        app.extensions[CLIENT_EXTENSION] = model_client
    if generator is not None:
        app.extensions[GENERATOR_EXTENSION] = generator

    app.register_blueprint(get_blueprint())

    @app.route("/")
    def index():
        return redirect(url_for("architect.index"))

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "provider": settings.provider})

    return app


if __name__ == "__main__":
    settings = load_settings()
    setup_logging(level=settings.log_level)
    app = create_app(settings)
    print(f"Starting server on http://{settings.host}:{settings.port}")
    app.run(host=settings.host, port=settings.port, debug=True)
