from types import SimpleNamespace

import pytest

from scribe.exceptions import ScribeError
from scribe.models import Transcription
from scribe.services import ai_service
from scribe.services.ai_service import AIService


class FakeModels:
    def __init__(self):
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "temperature": config.temperature})
        return SimpleNamespace(text="  Summary of the hearing.  ", usage_metadata=None)


@pytest.fixture
def fake_gemini(monkeypatch):
    models = FakeModels()
    monkeypatch.setattr(ai_service, "get_gemini_client", lambda: SimpleNamespace(models=models))
    return models


@pytest.fixture
def transcription(user):
    return Transcription.objects.create(
        user=user,
        title="Hearing",
        status="completed",
        content="[00:00:00] Judge: Court is in session",
    )


def test_build_prompt():
    assert "Summarize the legal transcript" in AIService.build_prompt("text", "summarize")
    assert "Who objected?" in AIService.build_prompt("text", "custom", "Who objected?")

    with pytest.raises(ScribeError):
        AIService.build_prompt("text", "custom", "  ")
    with pytest.raises(ScribeError):
        AIService.build_prompt("text", "translate")


@pytest.mark.django_db
def test_process_endpoint(user_client, transcription, fake_gemini, settings):
    settings.GEMINI_MODEL = "gemini-test"

    response = user_client.post(
        f"/api/transcriptions/{transcription.transcription_id}/process/",
        {"action": "summarize"},
        format="json",
    )

    assert response.status_code == 200
    assert response.data["result"] == "Summary of the hearing."
    assert fake_gemini.calls[0]["model"] == "gemini-test"
    assert "Court is in session" in fake_gemini.calls[0]["contents"]


@pytest.mark.django_db
def test_process_rate_limited(user_client, transcription, fake_gemini, settings):
    settings.GEMINI_RATE_LIMIT_MAX_CALLS = 1
    url = f"/api/transcriptions/{transcription.transcription_id}/process/"

    assert user_client.post(url, {"action": "summarize"}, format="json").status_code == 200

    response = user_client.post(url, {"action": "summarize"}, format="json")
    assert response.status_code == 429
    assert len(fake_gemini.calls) == 1


@pytest.mark.django_db
def test_process_requires_content(user_client, user, fake_gemini):
    empty = Transcription.objects.create(user=user, title="Empty")

    response = user_client.post(f"/api/transcriptions/{empty.transcription_id}/process/", format="json")

    assert response.status_code == 400
    assert not fake_gemini.calls


@pytest.mark.django_db
def test_missing_api_key_is_reported(monkeypatch, settings):
    monkeypatch.setattr(ai_service, "_gemini_client", None)
    settings.GEMINI_API_KEY = None

    with pytest.raises(ScribeError):
        ai_service.get_gemini_client()
