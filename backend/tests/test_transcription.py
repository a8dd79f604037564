import importlib
import os
import sys
from types import SimpleNamespace

import numpy as np
import pytest
from django.conf import settings
from django.core.files.uploadedfile import SimpleUploadedFile

from scribe.exceptions import TranscriptionUnavailableError
from scribe.models import Credits, Notification, Transcription
from scribe.services.organization_service import OrganizationService
from scribe.services.invitation_service import InvitationService
from scribe.services.transcription_engine import (
    SAMPLE_RATE,
    TranscriptionEngine,
    chunk_windows,
    merge_chunk_segments,
)
from scribe.services.transcription_service import (
    FALLBACK_TEXT,
    TranscriptionService,
    assign_speakers,
    build_content,
    format_srt_time,
    format_timestamp,
)
from scribe.tasks import transcribe_audio_task

task_module = importlib.import_module("scribe.tasks.transcribe_audio_task")


class FakeEngine:
    def __init__(self, seconds=90, segments=None, fail_load=False, fail_transcribe=False):
        self.seconds = seconds
        self.segments = segments if segments is not None else [
            {"start": 0.0, "end": 9.0, "text": "Please state your name. My name is John Doe. Objection!", "confidence": 0.9},
        ]
        self.fail_load = fail_load
        self.fail_transcribe = fail_transcribe

    def load_audio(self, path):
        if self.fail_load:
            raise RuntimeError("ffmpeg could not decode the file")
        return np.zeros(int(self.seconds * SAMPLE_RATE), dtype=np.float32)

    def transcribe_audio(self, audio):
        if self.fail_transcribe:
            raise RuntimeError("CUDA out of memory")
        return {
            "text": " ".join(seg["text"] for seg in self.segments),
            "segments": self.segments,
            "duration": len(audio) / SAMPLE_RATE,
        }


@pytest.fixture
def use_engine(monkeypatch):
    def _use_engine(engine):
        monkeypatch.setattr(task_module, "get_engine", lambda: engine)
        return engine

    return _use_engine


@pytest.fixture
def pending_transcription(user, tmp_path):
    audio = tmp_path / "hearing.wav"
    audio.write_bytes(b"RIFF0000WAVE")
    return Transcription.objects.create(
        user=user,
        title="Smith v. Jones",
        file_name="hearing.wav",
        file_size=12,
        local_path=str(audio),
    )


def test_chunk_windows_overlap_by_stride():
    windows = chunk_windows(70 * SAMPLE_RATE, chunk_seconds=30, stride_seconds=5)

    assert windows == [
        (0, 30 * SAMPLE_RATE),
        (25 * SAMPLE_RATE, 55 * SAMPLE_RATE),
        (50 * SAMPLE_RATE, 70 * SAMPLE_RATE),
    ]


def test_chunk_windows_edge_cases():
    assert chunk_windows(0, 30, 5) == []
    assert chunk_windows(10 * SAMPLE_RATE, 30, 5) == [(0, 10 * SAMPLE_RATE)]
    with pytest.raises(ValueError):
        chunk_windows(SAMPLE_RATE, 30, 30)


def test_merge_drops_segments_inside_overlap():
    merged = merge_chunk_segments(
        [
            (0.0, [{"start": 0.0, "end": 28.0, "text": " First window. "}]),
            (25.0, [
                {"start": 1.0, "end": 3.0, "text": "repeated tail"},
                {"start": 6.0, "end": 9.0, "text": "Second window", "avg_logprob": 0.0},
                {"start": 10.0, "end": 11.0, "text": "   "},
            ]),
        ],
        stride_seconds=5,
    )

    assert [seg["text"] for seg in merged] == ["First window.", "Second window"]
    assert merged[1]["start"] == 31.0
    assert merged[1]["end"] == 34.0
    assert merged[1]["confidence"] == 1.0


def test_merge_keeps_segment_straddling_window_boundary():
    merged = merge_chunk_segments(
        [
            (0.0, [
                {"start": 20.0, "end": 28.0, "text": "first part"},
                {"start": 27.0, "end": 30.0, "text": "cut off"},
            ]),
            (25.0, [
                {"start": 3.0, "end": 9.0, "text": "straddles the boundary"},
                {"start": 9.0, "end": 15.0, "text": "tail"},
            ]),
        ],
        stride_seconds=5,
    )

    assert [(seg["start"], seg["end"], seg["text"]) for seg in merged] == [
        (20.0, 28.0, "first part"),
        (28.0, 34.0, "straddles the boundary"),
        (34.0, 40.0, "tail"),
    ]


def test_merge_keeps_one_copy_of_overlap_segment():
    merged = merge_chunk_segments(
        [
            (0.0, [{"start": 26.0, "end": 30.0, "text": "said twice"}]),
            (25.0, [{"start": 1.0, "end": 5.0, "text": "said twice"}]),
        ],
        stride_seconds=5,
    )

    assert [(seg["start"], seg["text"]) for seg in merged] == [(26.0, "said twice")]


class FakeWhisperModel:
    def __init__(self, outputs):
        self.outputs = list(outputs)
        self.calls = []

    def transcribe(self, audio, **options):
        self.calls.append({"samples": len(audio), **options})
        return {"segments": self.outputs.pop(0) if self.outputs else []}


@pytest.fixture
def fake_whisper(monkeypatch):
    loads = []
    cleared = []
    whisper = SimpleNamespace(failing_devices=set(), model=FakeWhisperModel([]))

    def load_model(name, device):
        loads.append((name, device))
        if device in whisper.failing_devices:
            raise RuntimeError(f"cannot load on {device}")
        return whisper.model

    whisper.load_model = load_model
    whisper.loads = loads
    torch = SimpleNamespace(cuda=SimpleNamespace(is_available=lambda: True, empty_cache=lambda: cleared.append(True)))
    whisper.cleared = cleared

    monkeypatch.setitem(sys.modules, "whisper", whisper)
    monkeypatch.setitem(sys.modules, "torch", torch)
    return whisper


def test_engine_falls_back_to_cpu_when_gpu_load_fails(fake_whisper, settings):
    settings.WHISPER_MODEL = "base.en"
    settings.WHISPER_DEVICE = None
    fake_whisper.failing_devices = {"cuda"}
    engine = TranscriptionEngine()

    engine.initialize()

    assert fake_whisper.loads == [("base.en", "cuda"), ("base.en", "cpu")]
    assert engine.device == "cpu"
    assert engine.is_ready()
    assert fake_whisper.cleared == [True]


def test_engine_reports_unavailable_when_cpu_load_fails(fake_whisper, settings):
    settings.WHISPER_DEVICE = None
    fake_whisper.failing_devices = {"cuda", "cpu"}
    engine = TranscriptionEngine()

    with pytest.raises(TranscriptionUnavailableError, match="Unable to initialize transcription service"):
        engine.initialize()

    assert engine.model is None
    assert not engine.is_initializing()


def test_engine_feeds_each_window_to_the_model(fake_whisper, settings):
    settings.WHISPER_DEVICE = "cpu"
    settings.TRANSCRIPTION_CHUNK_SECONDS = 30
    settings.TRANSCRIPTION_STRIDE_SECONDS = 5
    fake_whisper.model = FakeWhisperModel([
        [{"start": 0.0, "end": 20.0, "text": " Court is in session."}],
        [{"start": 6.0, "end": 12.0, "text": " Be seated."}],
    ])
    engine = TranscriptionEngine()

    result = engine.transcribe_audio(np.zeros(40 * SAMPLE_RATE, dtype=np.float32))

    assert [call["samples"] for call in fake_whisper.model.calls] == [30 * SAMPLE_RATE, 15 * SAMPLE_RATE]
    assert fake_whisper.model.calls[0]["fp16"] is False
    assert result["text"] == "Court is in session. Be seated."
    assert result["segments"][1]["start"] == 31.0
    assert result["duration"] == 40.0


def test_engine_reports_no_speech(fake_whisper, settings):
    settings.WHISPER_DEVICE = "cpu"
    engine = TranscriptionEngine()

    result = engine.transcribe_audio(np.zeros(10 * SAMPLE_RATE, dtype=np.float32))

    assert result["text"] == "No speech detected"
    assert result["segments"] == []


def test_assign_speakers_cycles_roles_per_sentence():
    labeled = assign_speakers([
        {"start": 0.0, "end": 10.0, "text": "One. Two. Three.", "confidence": 0.8},
        {"start": 10.0, "end": 12.0, "text": "Four? Five!", "confidence": 0.7},
    ])

    assert [seg["speaker"] for seg in labeled] == ["Attorney", "Judge", "Witness", "Court Reporter", "Attorney"]
    assert [seg["text"] for seg in labeled] == ["One", "Two", "Three", "Four", "Five"]
    assert labeled[0]["start"] == 0.0
    assert labeled[3]["start"] == 10.0
    assert labeled[4]["confidence"] == 0.7


def test_assign_speakers_joins_sentences_across_segments():
    labeled = assign_speakers([
        {"start": 0.0, "end": 2.0, "text": "Good morning your", "confidence": 0.9},
        {"start": 2.0, "end": 5.0, "text": "honor. Please rise.", "confidence": 0.8},
    ])

    assert [(seg["speaker"], seg["text"]) for seg in labeled] == [
        ("Attorney", "Good morning your honor"),
        ("Judge", "Please rise"),
    ]
    assert labeled[0]["start"] == 0.0
    assert labeled[0]["end"] > 2.0
    assert labeled[1]["start"] >= labeled[0]["end"]
    assert labeled[1]["confidence"] == 0.8


def test_assign_speakers_without_segments_uses_text():
    labeled = assign_speakers([], "Court is in session. Be seated.")

    assert [seg["speaker"] for seg in labeled] == ["Attorney", "Judge"]
    assert all(seg["start"] == 0.0 for seg in labeled)


def test_formatting_helpers():
    assert format_timestamp(3725.9) == "01:02:05"
    assert format_srt_time(61.25) == "00:01:01,250"
    assert build_content([
        {"speaker": "Judge", "text": "Order", "start": 65.0},
        {"speaker": "Witness", "text": "Yes", "start": 70.0},
    ]) == "[00:01:05] Judge: Order\n\n[00:01:10] Witness: Yes"


@pytest.mark.django_db
def test_task_transcribes_and_charges_by_duration(use_engine, pending_transcription, user):
    use_engine(FakeEngine(seconds=90))

    result = transcribe_audio_task.apply(args=[str(pending_transcription.transcription_id)]).get()

    assert result["status"] == "completed"
    assert result["credits_charged"] == 2

    transcription = Transcription.objects.get(pk=pending_transcription.pk)
    assert transcription.status == "completed"
    assert transcription.audio_duration == 90
    assert transcription.speaker_count == 3
    assert transcription.charge_source == "personal"
    assert transcription.content.startswith("[00:00:00] Attorney: Please state your name")
    assert [s.segment_order for s in transcription.segments.all()] == [1, 2, 3]
    assert Credits.objects.get(user=user).remaining_credits == 28
    assert Notification.objects.filter(user=user, title="Transcription Ready").exists()


@pytest.mark.django_db
def test_task_skips_transcriptions_not_processing(use_engine, pending_transcription):
    use_engine(FakeEngine())
    Transcription.objects.filter(pk=pending_transcription.pk).update(status="completed")

    result = transcribe_audio_task.apply(args=[str(pending_transcription.transcription_id)]).get()

    assert result["status"] == "skipped"


@pytest.mark.django_db
def test_task_does_not_charge_twice(use_engine, pending_transcription, user):
    use_engine(FakeEngine(seconds=120))
    Transcription.objects.filter(pk=pending_transcription.pk).update(
        credits_charged=2, charge_source="personal"
    )

    transcribe_audio_task.apply(args=[str(pending_transcription.transcription_id)]).get()

    assert Credits.objects.get(user=user).remaining_credits == 30


@pytest.mark.django_db
def test_task_refunds_and_saves_fallback_when_whisper_fails(use_engine, pending_transcription, user):
    use_engine(FakeEngine(seconds=600, fail_transcribe=True))

    result = transcribe_audio_task.apply(args=[str(pending_transcription.transcription_id)]).get()

    assert result["status"] == "failed"
    transcription = Transcription.objects.get(pk=pending_transcription.pk)
    assert transcription.status == "failed"
    assert transcription.credits_charged == 0
    assert "CUDA out of memory" in transcription.error_message
    assert FALLBACK_TEXT in transcription.content
    assert transcription.segments.get().speaker_label == "System"
    assert Credits.objects.get(user=user).remaining_credits == 30
    assert Notification.objects.filter(user=user, title="Transcription Failed").exists()


@pytest.mark.django_db
def test_task_saves_fallback_when_audio_unreadable(use_engine, pending_transcription, user):
    use_engine(FakeEngine(fail_load=True))

    transcribe_audio_task.apply(args=[str(pending_transcription.transcription_id)]).get()

    transcription = Transcription.objects.get(pk=pending_transcription.pk)
    assert transcription.status == "failed"
    assert transcription.credits_charged == 0
    assert Credits.objects.get(user=user).remaining_credits == 30


@pytest.mark.django_db
def test_task_fails_with_insufficient_credits(use_engine, pending_transcription, user):
    use_engine(FakeEngine(seconds=45 * 60))

    result = transcribe_audio_task.apply(args=[str(pending_transcription.transcription_id)]).get()

    assert result["status"] == "failed"
    transcription = Transcription.objects.get(pk=pending_transcription.pk)
    assert transcription.status == "failed"
    assert "45 credits" in transcription.error_message
    assert Credits.objects.get(user=user).remaining_credits == 30
    assert Notification.objects.filter(user=user, type="credits", title="Insufficient Credits").exists()


@pytest.mark.django_db
def test_task_charges_organization_allocation(use_engine, make_user, tmp_path):
    owner = make_user(email="owner@lawfirm.com")
    reporter = make_user(email="reporter@lawfirm.com")
    org = OrganizationService.create_organization(owner, "Firm")
    OrganizationService.update_organization(org.organization_id, owner, shared_credits=50)
    invitation = InvitationService.invite_member(org.organization_id, owner, reporter.email)
    member = InvitationService.respond_to_invitation(invitation.member_id, reporter, True)
    OrganizationService.allocate_member_credits(org.organization_id, owner, member.member_id, 10)

    audio = tmp_path / "a.wav"
    audio.write_bytes(b"RIFF")
    transcription = Transcription.objects.create(user=reporter, title="Depo", local_path=str(audio))
    use_engine(FakeEngine(seconds=200))

    transcribe_audio_task.apply(args=[str(transcription.transcription_id)]).get()

    transcription.refresh_from_db()
    member.refresh_from_db()
    assert transcription.charge_source == "organization"
    assert transcription.charge_member_id == member.member_id
    assert member.used_credits == 4


@pytest.mark.django_db
def test_upload_queues_transcription(user_client, user, monkeypatch):
    queued = []

    def apply_async(args, queue):
        queued.append((args, queue))
        return SimpleNamespace(id="task-123")

    monkeypatch.setattr(
        "scribe.views.transcription_views.transcribe_audio_task",
        SimpleNamespace(apply_async=apply_async),
    )

    upload = SimpleUploadedFile("deposition.mp3", b"ID3audio-bytes", content_type="audio/mpeg")
    response = user_client.post(
        "/api/transcriptions/upload/",
        {"file": upload, "case_number": "CV-2024-001"},
        format="multipart",
    )

    assert response.status_code == 202
    transcription = Transcription.objects.get(transcription_id=response.data["transcription_id"])
    assert transcription.status == "processing"
    assert transcription.task_id == "task-123"
    assert transcription.case_number == "CV-2024-001"
    assert transcription.title.startswith("Transcription - ")
    assert os.path.exists(transcription.local_path)
    assert transcription.local_path.startswith(str(settings.MEDIA_ROOT))
    assert queued == [([str(transcription.transcription_id)], "audio.transcribe")]


@pytest.mark.django_db
def test_upload_rejects_non_audio(user_client):
    upload = SimpleUploadedFile("notes.pdf", b"%PDF", content_type="application/pdf")

    response = user_client.post("/api/transcriptions/upload/", {"file": upload}, format="multipart")

    assert response.status_code == 400
    assert response.data["error"] == "Please select an audio or video file."


@pytest.mark.django_db
def test_upload_requires_credits(client_for, make_user):
    broke = make_user(email="broke@example.com")
    upload = SimpleUploadedFile("a.wav", b"RIFF", content_type="audio/wav")

    response = client_for(broke).post("/api/transcriptions/upload/", {"file": upload}, format="multipart")

    assert response.status_code == 402
    assert response.data["error_code"] == "INSUFFICIENT_CREDITS"


@pytest.mark.django_db
def test_export_and_detail(user_client, user):
    transcription = Transcription.objects.create(user=user, title="Hearing")
    TranscriptionService.save_result(
        transcription,
        assign_speakers([{"start": 0.0, "end": 4.0, "text": "All rise. Be seated.", "confidence": 0.9}]),
        4.0,
    )

    response = user_client.get(f"/api/transcriptions/{transcription.transcription_id}/")
    assert response.status_code == 200
    assert [s["speaker_label"] for s in response.data["segments"]] == ["Attorney", "Judge"]

    response = user_client.get(f"/api/transcriptions/{transcription.transcription_id}/export/?format=txt")
    assert response.status_code == 200
    assert response["Content-Disposition"].startswith('attachment; filename="legal-transcript-')
    assert "[00:00:00] Attorney (90%): All rise" in response.content.decode()

    response = user_client.get(f"/api/transcriptions/{transcription.transcription_id}/export/?format=srt")
    assert "1\n00:00:00,000 --> 00:00:01,600" in response.content.decode()

    response = user_client.get(f"/api/transcriptions/{transcription.transcription_id}/export/?format=docx")
    assert response.status_code == 400


@pytest.mark.django_db
def test_other_users_cannot_read_transcription(client_for, make_user, user):
    transcription = Transcription.objects.create(user=user, title="Private")
    other = make_user(email="other@example.com")

    response = client_for(other).get(f"/api/transcriptions/{transcription.transcription_id}/")

    assert response.status_code == 404
