"""
Tests for the Flask blueprint, using Flask's test client.
"""

import io
import json

import pytest

from app import create_app
from src.agents.architect_agent.llm import ModelOutcome, OutcomeStatus
from src.config import Settings

from conftest import IMAGE_DATA_URL, FakeModelClient, make_cloning_payload, make_plan_payload


class SpyGenerator:
    def __init__(self):
        self.calls = []

    def __call__(self, template_bytes, instructions):
        self.calls.append(instructions)
        return b"PPTX-BYTES"


def _client_for(model_client, generator=None):
    app = create_app(Settings(), model_client=model_client, generator=generator)
    app.config["TESTING"] = True
    return app.test_client()


def _upload(data: bytes, name: str = "deck.pptx"):
    return (io.BytesIO(data), name)


class TestAppShell:
    def test_health(self):
        response = _client_for(FakeModelClient()).get("/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "ok"

    def test_root_redirects_to_form(self):
        response = _client_for(FakeModelClient()).get("/")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/architect/")

    def test_form_page(self):
        response = _client_for(FakeModelClient()).get("/architect/")
        assert response.status_code == 200
        assert b"Slide Architect" in response.data


class TestPlanRoute:
    def test_success(self, user_content):
        model = FakeModelClient.returning_json(make_plan_payload([0]))
        response = _client_for(model).post(
            "/architect/plan",
            json={"template_images": [IMAGE_DATA_URL], "user_content": user_content},
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["success"] is True
        assert body["plan"]["presentation_title"] == "Quarterly Review"

    def test_short_content(self):
        model = FakeModelClient()
        response = _client_for(model).post(
            "/architect/plan",
            json={"template_images": [IMAGE_DATA_URL], "user_content": "too short"},
        )
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "invalid-input"
        assert model.requests == []

    def test_rate_limited(self, user_content):
        model = FakeModelClient(outcome=ModelOutcome.failure(OutcomeStatus.RATE_LIMITED, "slow down"))
        response = _client_for(model).post(
            "/architect/plan",
            json={"template_images": [IMAGE_DATA_URL], "user_content": user_content, "language": "fr"},
        )
        assert response.status_code == 429
        assert response.get_json()["error"]["message"] == "Trop de requêtes. Attendez quelques minutes."

    def test_non_object_body(self):
        model = FakeModelClient()
        response = _client_for(model).post("/architect/plan", json=[1, 2])

        assert response.status_code == 400
        assert response.is_json
        assert response.get_json()["error"]["code"] == "invalid-input"
        assert model.requests == []

    def test_non_string_language(self, user_content):
        model = FakeModelClient()
        response = _client_for(model).post(
            "/architect/plan",
            json={"template_images": [IMAGE_DATA_URL], "user_content": user_content, "language": 1},
        )

        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "invalid-input"
        assert model.requests == []

    def test_timeout(self, user_content):
        model = FakeModelClient(outcome=ModelOutcome.failure(OutcomeStatus.TIMEOUT, "deadline"))
        response = _client_for(model).post(
            "/architect/plan",
            json={"template_images": [IMAGE_DATA_URL], "user_content": user_content},
        )
        assert response.status_code == 504


class TestTemplateRoute:
    def test_describe(self, sample_pptx_bytes):
        response = _client_for(FakeModelClient()).post(
            "/architect/template",
            data={"template": _upload(sample_pptx_bytes)},
            content_type="multipart/form-data",
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["template"]["total_slides"] == 5
        assert body["template_summary"] == "Template: 5 slides parsed"
        assert body["prompt_text"].startswith("Template Analysis:")

    def test_wrong_extension(self, sample_pptx_bytes):
        response = _client_for(FakeModelClient()).post(
            "/architect/template",
            data={"template": _upload(sample_pptx_bytes, "deck.pdf")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 400

    def test_corrupt_template(self):
        response = _client_for(FakeModelClient()).post(
            "/architect/template",
            data={"template": _upload(b"garbage")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "template-invalid"


class TestCloneRoute:
    def test_success(self, sample_pptx_bytes, user_content):
        model = FakeModelClient.returning_json(make_cloning_payload([0, 2, 4]))
        response = _client_for(model).post(
            "/architect/clone",
            data={"template": _upload(sample_pptx_bytes), "user_content": user_content},
            content_type="multipart/form-data",
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["template_summary"] == "Template: 5 slides parsed"
        assert len(body["instructions"]["slides"]) == 3

    def test_user_file(self, sample_pptx_bytes, user_content):
        model = FakeModelClient.returning_json(make_cloning_payload([1]))
        response = _client_for(model).post(
            "/architect/clone",
            data={
                "template": _upload(sample_pptx_bytes),
                "user_file": (io.BytesIO(user_content.encode("utf-8")), "notes.md"),
            },
            content_type="multipart/form-data",
        )

        assert response.status_code == 200
        assert user_content in model.requests[0].user_prompt

    def test_out_of_bounds(self, sample_pptx_bytes, user_content):
        model = FakeModelClient.returning_json(make_cloning_payload([0, 5]))
        response = _client_for(model).post(
            "/architect/clone",
            data={"template": _upload(sample_pptx_bytes), "user_content": user_content},
            content_type="multipart/form-data",
        )

        assert response.status_code == 422
        error = response.get_json()["error"]
        assert error["code"] == "reference-out-of-bounds"
        assert "[0, 5)" in error["details"]

    def test_invalid_model_json(self, sample_pptx_bytes, user_content):
        response = _client_for(FakeModelClient(text="nope")).post(
            "/architect/clone",
            data={"template": _upload(sample_pptx_bytes), "user_content": user_content},
            content_type="multipart/form-data",
        )
        assert response.status_code == 502

    def test_missing_template(self, user_content):
        response = _client_for(FakeModelClient()).post(
            "/architect/clone",
            data={"user_content": user_content},
            content_type="multipart/form-data",
        )
        assert response.status_code == 400


class TestGenerateRoute:
    def test_download(self, sample_pptx_bytes):
        generator = SpyGenerator()
        response = _client_for(FakeModelClient(), generator).post(
            "/architect/generate",
            data={
                "template": _upload(sample_pptx_bytes),
                "instructions": json.dumps(make_cloning_payload([0, 1])),
            },
            content_type="multipart/form-data",
        )

        assert response.status_code == 200
        assert response.data == b"PPTX-BYTES"
        assert "presentation-generated-" in response.headers["Content-Disposition"]
        assert len(generator.calls) == 1

    def test_out_of_bounds_never_generates(self, sample_pptx_bytes):
        generator = SpyGenerator()
        response = _client_for(FakeModelClient(), generator).post(
            "/architect/generate",
            data={
                "template": _upload(sample_pptx_bytes),
                "instructions": json.dumps(make_cloning_payload([7])),
            },
            content_type="multipart/form-data",
        )

        assert response.status_code == 422
        assert generator.calls == []

    @pytest.mark.parametrize("instructions,status", [("", 400), ("{broken", 502)])
    def test_bad_instructions(self, sample_pptx_bytes, instructions, status):
        response = _client_for(FakeModelClient(), SpyGenerator()).post(
            "/architect/generate",
            data={"template": _upload(sample_pptx_bytes), "instructions": instructions},
            content_type="multipart/form-data",
        )
        assert response.status_code == status
