"""Flask blueprint exposing the slide architect pipelines."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Optional, Tuple

from flask import (
    Blueprint,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template_string,
    request,
    send_file,
    url_for,
)
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from src.agents.template_introspection.service import (
    format_template_for_prompt,
    load_template,
    summarize_template,
)
from src.config import Settings
from src.slide_generation.generator import generate_pptx_from_instructions

from .data_handler import get_user_content, scoped_workspace
from .errors import ArchitectError, ErrorKind, InvalidInputError, PipelineError
from .llm import ModelClient, build_model_client
from .orchestrator import generate_cloning_plan, generate_presentation_file, generate_presentation_plan

logger = logging.getLogger(__name__)

SETTINGS_KEY = "ARCHITECT_SETTINGS"
CLIENT_EXTENSION = "architect_model_client"
GENERATOR_EXTENSION = "architect_generator"

PPTX_MIMETYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.TEMPLATE_INVALID: 400,
    ErrorKind.UPSTREAM_INVALID_RESPONSE: 502,
    ErrorKind.UPSTREAM_SCHEMA_VIOLATION: 502,
    ErrorKind.UPSTREAM_TIMEOUT: 504,
    ErrorKind.UPSTREAM_RATE_LIMITED: 429,
    ErrorKind.REFERENCE_OUT_OF_BOUNDS: 422,
    ErrorKind.GENERATION_FAILURE: 500,
    ErrorKind.UNKNOWN: 500,
}

architect_bp = Blueprint("architect", __name__, url_prefix="/architect")

FORM_HTML = """
<!doctype html>
<title>Slide Architect</title>
<h1>Slide Architect</h1>
{% with messages = get_flashed_messages(with_categories=true) %}
  {% for category, message in messages %}
    <p class="flash {{ category }}">{{ message }}</p>
  {% endfor %}
{% endwith %}
<form method="post" enctype="multipart/form-data">
  <p><label>PPTX template <input type="file" name="template" accept=".pptx" required></label></p>
  <p><label>Content<br><textarea name="user_content" rows="12" cols="80" maxlength="{{ max_chars }}"></textarea></label></p>
  <p><label>or content file (.txt, .md, .pdf) <input type="file" name="user_file"></label></p>
  <p><label>Language
    <select name="language">
      <option value="en">English</option>
      <option value="fr">Français</option>
    </select></label></p>
  <p><button type="submit">Generate cloning plan</button></p>
</form>
{% if summary %}<h2>{{ summary }}</h2>{% endif %}
{% if result_json %}
  <pre>{{ result_json }}</pre>
  <form method="post" action="{{ url_for('architect.generate_file') }}" enctype="multipart/form-data">
    <input type="hidden" name="instructions" value="{{ result_json }}">
    <p><label>Template again <input type="file" name="template" accept=".pptx" required></label></p>
    <p><button type="submit">Download PPTX</button></p>
  </form>
{% endif %}
"""


def _settings() -> Settings:
    settings = current_app.config.get(SETTINGS_KEY)
    if settings is None:
        settings = Settings()
        current_app.config[SETTINGS_KEY] = settings
    return settings


def _model_client() -> ModelClient:
    client = current_app.extensions.get(CLIENT_EXTENSION)
    if client is None:
        client = build_model_client(_settings())
        current_app.extensions[CLIENT_EXTENSION] = client
    return client


def _language(default: str) -> str:
    return (request.form.get("language") or request.args.get("language") or default).lower()


def _error_response(error: PipelineError) -> Tuple:
    return jsonify({"success": False, "error": error.to_dict()}), STATUS_BY_KIND.get(error.kind, 500)


def _read_template_upload(settings: Settings) -> bytes:
    file: Optional[FileStorage] = request.files.get("template")
    if not file or not file.filename:
        raise InvalidInputError("Please choose a PPTX template to upload.")
    if Path(file.filename).suffix.lower() != ".pptx":
        raise InvalidInputError("Template must be a .pptx file.")
    data = file.read()
    if len(data) > settings.max_template_bytes:
        raise InvalidInputError(
            f"Template is too large ({len(data)} bytes, max {settings.max_template_bytes} bytes)"
        )
    return data


def _read_user_content(settings: Settings) -> Optional[str]:
    text = request.form.get("user_content")
    if text and text.strip():
        return text
    file: Optional[FileStorage] = request.files.get("user_file")
    if not file or not file.filename:
        return text
    with scoped_workspace(root=settings.upload_folder) as workdir:
        dest = workdir / secure_filename(file.filename or "user_upload")
        file.save(dest)
        return get_user_content(dest)


def _run_cloning(settings: Settings, language: str):
    template_bytes = _read_template_upload(settings)
    user_content = _read_user_content(settings)
    return generate_cloning_plan(
        template_bytes,
        user_content,
        client=_model_client(),
        language=language,
        settings=settings,
    )


@architect_bp.route("/", methods=["GET", "POST"])
def index():
    settings = _settings()
    if request.method == "POST":
        try:
            result = _run_cloning(settings, _language(settings.language))
        except (ArchitectError, FileNotFoundError, RuntimeError) as exc:
            logger.warning("Cloning form rejected: %s", exc)
            flash(str(exc), "error")
            return redirect(url_for("architect.index"))
        if not result.success:
            message = result.error.message
            if result.error.details:
                message = f"{message} ({result.error.details})"
            flash(message, "error")
            return redirect(url_for("architect.index"))
        return render_template_string(
            FORM_HTML,
            max_chars=settings.max_content_chars,
            summary=result.template_summary,
            result_json=json.dumps(result.instructions.model_dump(mode="json", exclude_unset=True), indent=2),
        )
    return render_template_string(FORM_HTML, max_chars=settings.max_content_chars, summary=None, result_json=None)


@architect_bp.route("/plan", methods=["POST"])
def create_plan():
    settings = _settings()
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return _error_response(
            PipelineError.from_kind(
                ErrorKind.INVALID_INPUT,
                "Request body must be a JSON object",
                language=settings.language,
            )
        )
    requested_language = payload.get("language")
    language = requested_language.lower() if isinstance(requested_language, str) else settings.language
    try:
        client = _model_client()
    except RuntimeError as exc:
        return _error_response(PipelineError.from_kind(ErrorKind.UNKNOWN, str(exc), language=language))
    result = generate_presentation_plan(
        payload.get("template_images"),
        payload.get("user_content"),
        client=client,
        language=requested_language,
        settings=settings,
    )
    if not result.success:
        return _error_response(result.error)
    return jsonify(result.to_dict())


@architect_bp.route("/template", methods=["POST"])
def describe_template():
    settings = _settings()
    language = _language(settings.language)
    try:
        descriptor = load_template(_read_template_upload(settings), max_bytes=settings.max_template_bytes)
    except ArchitectError as exc:
        return _error_response(PipelineError.from_exception(exc, language=language))
    return jsonify(
        {
            "success": True,
            "template": descriptor.model_dump(mode="json"),
            "template_summary": summarize_template(descriptor),
            "prompt_text": format_template_for_prompt(descriptor),
        }
    )


@architect_bp.route("/clone", methods=["POST"])
def create_cloning_plan():
    settings = _settings()
    language = _language(settings.language)
    try:
        result = _run_cloning(settings, language)
    except (ArchitectError, FileNotFoundError) as exc:
        return _error_response(PipelineError.from_exception(exc, language=language))
    except RuntimeError as exc:
        return _error_response(PipelineError.from_kind(ErrorKind.UNKNOWN, str(exc), language=language))
    if not result.success:
        return _error_response(result.error)
    return jsonify(result.to_dict())


@architect_bp.route("/generate", methods=["POST"])
def generate_file():
    settings = _settings()
    language = _language(settings.language)
    try:
        template_bytes = _read_template_upload(settings)
    except ArchitectError as exc:
        return _error_response(PipelineError.from_exception(exc, language=language))

    generator = current_app.extensions.get(GENERATOR_EXTENSION, generate_pptx_from_instructions)
    result = generate_presentation_file(
        template_bytes,
        request.form.get("instructions"),
        generator=generator,
        language=language,
        settings=settings,
    )
    if not result.success:
        return _error_response(result.error)
    return send_file(
        io.BytesIO(result.content),
        mimetype=PPTX_MIMETYPE,
        as_attachment=True,
        download_name=result.file_name,
    )


__all__ = ["architect_bp", "STATUS_BY_KIND"]
