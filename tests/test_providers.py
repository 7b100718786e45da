"""Tests for the provider backends, using fake HTTP sessions and clients."""

from types import SimpleNamespace

import httpx
import openai
import pytest

from genstudio.generation import (
    GenerationTimeoutError,
    MissingAPIKeyError,
    OpenAIImageProvider,
    ProviderError,
    ProviderRegistry,
    ReplicateProvider,
    RunwayProvider,
    StabilityProvider,
    UnsupportedProviderError,
)
from genstudio.generation.replicate import IMAGE_VERSION, PREDICTIONS_URL, VIDEO_VERSION
from genstudio.generation.runway import GENERATE_URL, TASKS_URL, interpret_task
from genstudio.generation.stability import REMOVE_BACKGROUND_URL, TEXT_TO_IMAGE_URL


class _FakeResponse:
    def __init__(self, body=None, status_code=200):
        self._body = body
        self.status_code = status_code
        self.ok = 200 <= status_code < 300

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class _FakeSession:
    """Returns queued responses and records every request."""

    def __init__(self, post=(), get=()):
        self._post = list(post)
        self._get = list(get)
        self.posts = []
        self.gets = []

    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        return self._post.pop(0)

    def get(self, url, **kwargs):
        self.gets.append((url, kwargs))
        return self._get.pop(0)


def _stages(updates):
    return [(u.progress, u.stage) for u in updates]


# ── Registry ─────────────────────────────────────────────────────────────────


def test_builtin_providers_registered():
    assert {"openai", "replicate", "runwayml", "stabilityai"} <= set(ProviderRegistry.available())
    assert ProviderRegistry.get("runwayml") is RunwayProvider
    assert StabilityProvider.name == "stabilityai"


def test_create_unknown_provider_raises_key_error():
    with pytest.raises(KeyError, match="not found"):
        ProviderRegistry.create("midjourney", api_key="x")


def test_missing_key_rejected_at_construction():
    with pytest.raises(MissingAPIKeyError):
        StabilityProvider(api_key="")


def test_image_only_provider_rejects_video():
    provider = StabilityProvider(api_key="key", session=_FakeSession())
    assert provider.supports("image")
    assert not provider.supports("video")
    with pytest.raises(UnsupportedProviderError):
        provider.generate_video("waves")


# ── OpenAI ───────────────────────────────────────────────────────────────────


class _FakeImages:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def generate(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result


def _openai_client(images):
    return SimpleNamespace(images=images)


def test_openai_returns_hosted_url():
    images = _FakeImages(result=SimpleNamespace(data=[SimpleNamespace(url="https://oai/img.png")]))
    provider = OpenAIImageProvider(api_key="sk-test", client=_openai_client(images))
    updates = []

    url = provider.generate_image("a red fox", updates.append)

    assert url == "https://oai/img.png"
    call = images.calls[0]
    assert call["model"] == "dall-e-3"
    assert call["n"] == 1
    assert call["size"] == "1024x1024"
    assert call["quality"] == "standard"
    assert _stages(updates) == [
        (20, "Connecting to OpenAI..."),
        (80, "Processing image..."),
        (95, "Finalizing..."),
    ]


def test_openai_without_url_fails():
    images = _FakeImages(result=SimpleNamespace(data=[]))
    provider = OpenAIImageProvider(api_key="sk-test", client=_openai_client(images))
    with pytest.raises(ProviderError, match="No image URL returned from OpenAI"):
        provider.generate_image("a red fox")


def test_openai_api_error_message_is_kept():
    request = httpx.Request("POST", "https://api.openai.com/v1/images/generations")
    error = openai.BadRequestError(
        "Your request was rejected by the safety system.",
        response=httpx.Response(400, request=request),
        body=None,
    )
    provider = OpenAIImageProvider(api_key="sk-test", client=_openai_client(_FakeImages(error=error)))

    with pytest.raises(ProviderError) as exc_info:
        provider.generate_image("a red fox")
    assert "safety system" in str(exc_info.value)
    assert exc_info.value.status_code == 400


def test_openai_rate_limit_is_not_retried(monkeypatch):
    requests_seen = []

    def handler(request):
        requests_seen.append(request)
        return httpx.Response(429, json={"error": {"message": "Rate limit reached"}})

    real_client = openai.OpenAI

    def client_with_mock_transport(**kwargs):
        transport = httpx.MockTransport(handler)
        return real_client(http_client=httpx.Client(transport=transport), **kwargs)

    monkeypatch.setattr(
        "genstudio.generation.openai_images.openai.OpenAI", client_with_mock_transport
    )
    provider = OpenAIImageProvider(api_key="sk-" + "x" * 30)

    with pytest.raises(ProviderError) as exc_info:
        provider.generate_image("a red fox")
    assert exc_info.value.status_code == 429
    assert len(requests_seen) == 1


# ── Stability AI ─────────────────────────────────────────────────────────────


def test_stability_returns_png_data_url():
    session = _FakeSession(post=[_FakeResponse({"artifacts": [{"base64": "QUJD"}]})])
    provider = StabilityProvider(api_key="stab-key", session=session)

    assert provider.generate_image("castle") == "data:image/png;base64,QUJD"

    url, kwargs = session.posts[0]
    assert url == TEXT_TO_IMAGE_URL
    assert kwargs["json"]["text_prompts"] == [{"text": "castle", "weight": 1}]
    assert kwargs["json"]["steps"] == 30
    assert kwargs["json"]["cfg_scale"] == 7
    assert kwargs["headers"]["Authorization"] == "Bearer stab-key"
    assert kwargs["headers"]["Accept"] == "application/json"


def test_stability_error_uses_message_field():
    session = _FakeSession(post=[_FakeResponse({"message": "Insufficient balance"}, 402)])
    provider = StabilityProvider(api_key="stab-key", session=session)
    with pytest.raises(ProviderError, match="Insufficient balance"):
        provider.generate_image("castle")


def test_stability_error_without_body_uses_status():
    session = _FakeSession(post=[_FakeResponse(None, 500)])
    provider = StabilityProvider(api_key="stab-key", session=session)
    with pytest.raises(ProviderError, match="Stability AI API error: 500"):
        provider.generate_image("castle")


def test_stability_missing_artifacts():
    session = _FakeSession(post=[_FakeResponse({"artifacts": []})])
    provider = StabilityProvider(api_key="stab-key", session=session)
    with pytest.raises(ProviderError, match="No image data returned from Stability AI"):
        provider.generate_image("castle")


def test_stability_remove_background_uploads_multipart(tmp_path):
    source = tmp_path / "photo.png"
    source.write_bytes(b"\x89PNG fake")
    session = _FakeSession(post=[_FakeResponse({"image": "Q1VU"})])
    provider = StabilityProvider(api_key="stab-key", session=session)

    assert provider.remove_background(str(source)) == "data:image/png;base64,Q1VU"

    url, kwargs = session.posts[0]
    assert url == REMOVE_BACKGROUND_URL
    assert kwargs["files"] == {"image": ("photo.png", b"\x89PNG fake")}
    assert kwargs["data"] == {"output_format": "png"}
    assert "json" not in kwargs


# ── Replicate ────────────────────────────────────────────────────────────────


def test_replicate_image_submits_and_polls():
    session = _FakeSession(
        post=[_FakeResponse({"id": "pred-1", "status": "starting"}, 201)],
        get=[
            _FakeResponse({"status": "processing"}),
            _FakeResponse({"status": "succeeded", "output": ["https://rep/out.png"]}),
        ],
    )
    sleeps, updates = [], []
    provider = ReplicateProvider(api_key="r8_token", session=session, sleep=sleeps.append)

    url = provider.generate_image("sunset", updates.append)

    assert url == "https://rep/out.png"
    post_url, kwargs = session.posts[0]
    assert post_url == PREDICTIONS_URL
    assert kwargs["json"]["version"] == IMAGE_VERSION
    assert kwargs["json"]["input"]["num_outputs"] == 1
    assert kwargs["headers"]["Authorization"] == "Token r8_token"
    assert [g[0] for g in session.gets] == [f"{PREDICTIONS_URL}/pred-1"] * 2
    assert sleeps == [2.0, 2.0]
    assert updates[1].stage == "Generating image..."
    assert updates[-1].progress == 95


def test_replicate_video_accepts_string_output():
    session = _FakeSession(
        post=[_FakeResponse({"id": "pred-2"})],
        get=[_FakeResponse({"status": "succeeded", "output": "https://rep/clip.mp4"})],
    )
    provider = ReplicateProvider(api_key="r8_token", session=session, sleep=lambda s: None)

    assert provider.generate_video("waves") == "https://rep/clip.mp4"
    assert session.posts[0][1]["json"]["version"] == VIDEO_VERSION
    assert session.posts[0][1]["json"]["input"]["num_frames"] == 24


def test_replicate_submit_error_uses_detail():
    session = _FakeSession(post=[_FakeResponse({"detail": "Invalid version"}, 422)])
    provider = ReplicateProvider(api_key="r8_token", session=session, sleep=lambda s: None)
    with pytest.raises(ProviderError, match="Invalid version"):
        provider.generate_image("sunset")


def test_replicate_failed_prediction():
    session = _FakeSession(
        post=[_FakeResponse({"id": "pred-3"})],
        get=[_FakeResponse({"status": "failed", "error": None})],
    )
    provider = ReplicateProvider(api_key="r8_token", session=session, sleep=lambda s: None)
    with pytest.raises(ProviderError, match="Prediction failed"):
        provider.generate_image("sunset")


# ── RunwayML ─────────────────────────────────────────────────────────────────


def test_runway_video_polls_task():
    session = _FakeSession(
        post=[_FakeResponse({"id": "task-9"})],
        get=[
            _FakeResponse({"status": "RUNNING"}),
            _FakeResponse({"status": "SUCCEEDED", "output": {"url": "https://rw/v.mp4"}}),
        ],
    )
    sleeps, updates = [], []
    provider = RunwayProvider(api_key="rw-key", session=session, sleep=sleeps.append)

    assert provider.generate_video("storm", updates.append) == "https://rw/v.mp4"

    post_url, kwargs = session.posts[0]
    assert post_url == GENERATE_URL
    assert kwargs["json"] == {
        "model": "gen2",
        "prompt": "storm",
        "duration": 4,
        "resolution": "1280x768",
    }
    assert session.gets[0][0] == f"{TASKS_URL}/task-9"
    assert sleeps == [3.0, 3.0]
    assert "Processing video..." in [u.stage for u in updates]


def test_runway_accepts_list_output():
    assert interpret_task(
        {"status": "SUCCEEDED", "output": ["https://rw/a.mp4", "https://rw/b.mp4"]}
    ).output_url == "https://rw/a.mp4"

    session = _FakeSession(
        post=[_FakeResponse({"id": "task-9"})],
        get=[_FakeResponse({"status": "SUCCEEDED", "output": ["https://rw/v.mp4"]})],
    )
    provider = RunwayProvider(api_key="rw-key", session=session, sleep=lambda s: None)
    assert provider.generate_video("storm") == "https://rw/v.mp4"


@pytest.mark.parametrize("output", [[], None, "https://rw/v.mp4"])
def test_runway_succeeded_without_usable_output(output):
    session = _FakeSession(
        post=[_FakeResponse({"id": "task-9"})],
        get=[_FakeResponse({"status": "SUCCEEDED", "output": output})],
    )
    provider = RunwayProvider(api_key="rw-key", session=session, sleep=lambda s: None)
    with pytest.raises(ProviderError, match="No video URL in task output"):
        provider.generate_video("storm")


def test_runway_times_out():
    session = _FakeSession(
        post=[_FakeResponse({"id": "task-9"})],
        get=[_FakeResponse({"status": "PENDING"})] * 2,
    )
    provider = RunwayProvider(
        api_key="rw-key", session=session, max_attempts=2, sleep=lambda s: None
    )
    with pytest.raises(GenerationTimeoutError, match="Video generation timed out"):
        provider.generate_video("storm")


def test_runway_does_not_generate_images():
    provider = RunwayProvider(api_key="rw-key", session=_FakeSession())
    with pytest.raises(UnsupportedProviderError):
        provider.generate_image("storm")
