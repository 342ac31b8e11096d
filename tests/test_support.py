"""
Tests for configuration, error values and upload helpers.
"""

import base64

import pytest

from src.agents.architect_agent.data_handler import (
    decode_base64_payload,
    get_user_content,
    scoped_workspace,
    strip_data_url,
)
from src.agents.architect_agent.errors import (
    ErrorKind,
    InvalidInputError,
    PipelineError,
    ReferenceOutOfBoundsError,
    user_message,
)
from src.config import Settings, load_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.provider == "gemini"
        assert settings.min_content_chars == 20
        assert settings.max_content_chars == 10_000
        assert settings.language == "en"

    def test_load_from_env(self, monkeypatch):
        monkeypatch.setenv("ARCHITECT_PROVIDER", "OpenAI")
        monkeypatch.setenv("ARCHITECT_MAX_TEMPLATE_MB", "2")
        monkeypatch.setenv("ARCHITECT_LANGUAGE", "FR")
        settings = load_settings()

        assert settings.provider == "openai"
        assert settings.max_template_bytes == 2 * 1024 * 1024
        assert settings.language == "fr"

    def test_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("ARCHITECT_REQUEST_TIMEOUT", "soon")
        with pytest.raises(RuntimeError, match="ARCHITECT_REQUEST_TIMEOUT"):
            load_settings()

    def test_invalid_provider(self):
        with pytest.raises(RuntimeError):
            Settings(provider="llama")

    def test_inconsistent_limits(self):
        with pytest.raises(RuntimeError):
            Settings(min_content_chars=100, max_content_chars=10)


class TestPipelineError:
    def test_from_architect_error(self):
        exc = ReferenceOutOfBoundsError("Slide 2 references template slide 5, valid range is [0, 5)", index=5, upper=5)
        error = PipelineError.from_exception(exc)

        assert error.kind is ErrorKind.REFERENCE_OUT_OF_BOUNDS
        assert error.to_dict() == {
            "code": "reference-out-of-bounds",
            "message": user_message(ErrorKind.REFERENCE_OUT_OF_BOUNDS),
            "details": str(exc),
        }

    def test_foreign_exception_is_unknown(self):
        error = PipelineError.from_exception(KeyError("x"), language="fr")
        assert error.kind is ErrorKind.UNKNOWN
        assert error.message == "Une erreur s'est produite."

    def test_every_kind_has_messages(self):
        for kind in ErrorKind:
            assert user_message(kind, "en")
            assert user_message(kind, "fr")

    def test_details_omitted_when_empty(self):
        assert "details" not in PipelineError.from_kind(ErrorKind.UNKNOWN).to_dict()


class TestDataHandler:
    def test_scoped_workspace_removed_on_error(self, tmp_path):
        seen = []
        with pytest.raises(RuntimeError):
            with scoped_workspace(root=str(tmp_path)) as workdir:
                seen.append(workdir)
                (workdir / "upload.txt").write_text("data")
                raise RuntimeError("fail mid-request")
        assert not seen[0].exists()

    def test_text_content(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("  hello world  \n", encoding="utf-8")
        assert get_user_content(path) == "hello world"

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "notes.docx"
        path.write_bytes(b"x")
        with pytest.raises(InvalidInputError):
            get_user_content(path)

    def test_blank_file(self, tmp_path):
        path = tmp_path / "empty.md"
        path.write_text("   ", encoding="utf-8")
        with pytest.raises(InvalidInputError):
            get_user_content(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_user_content(tmp_path / "nope.txt")

    def test_pdf_content(self, tmp_path):
        import fitz

        path = tmp_path / "content.pdf"
        doc = fitz.open()
        page = doc.new_page()
        page.insert_text((72, 72), "Hello from a PDF")
        doc.save(path)
        doc.close()

        assert "Hello from a PDF" in get_user_content(path)

    def test_strip_data_url(self):
        assert strip_data_url("data:image/png;base64,AAAA") == "AAAA"
        assert strip_data_url("AAAA") == "AAAA"

    def test_decode_base64(self):
        assert decode_base64_payload(base64.b64encode(b"abc").decode()) == b"abc"
        with pytest.raises(InvalidInputError):
            decode_base64_payload("   ")
