"""Tests for the provider catalogue, key helpers and provider priority."""

from genstudio.keys import (
    APIKeys,
    get_configured_providers,
    has_any_provider,
    mask_api_key,
    provider_for_feature,
    validate_api_key_format,
)


def test_image_priority_prefers_openai_then_stability_then_replicate():
    assert provider_for_feature(APIKeys(replicate="r", stabilityai="s", openai="o"), "image") == "openai"
    assert provider_for_feature(APIKeys(replicate="r", stabilityai="s"), "image") == "stabilityai"
    assert provider_for_feature(APIKeys(replicate="r"), "image") == "replicate"


def test_video_priority_prefers_runway_over_replicate():
    assert provider_for_feature(APIKeys(replicate="r", runwayml="w"), "video") == "runwayml"
    assert provider_for_feature(APIKeys(replicate="r"), "video") == "replicate"


def test_no_provider_for_feature():
    assert provider_for_feature(APIKeys(openai="o"), "video") is None
    assert provider_for_feature(APIKeys(), "image") is None
    assert provider_for_feature(APIKeys(openai="o"), "audio") is None


def test_empty_string_key_counts_as_unconfigured():
    keys = APIKeys(openai="", stabilityai="s")
    assert provider_for_feature(keys, "image") == "stabilityai"


def test_configured_providers_in_catalogue_order():
    statuses = get_configured_providers(APIKeys(runwayml="w"))
    assert [s.provider for s in statuses] == ["openai", "stabilityai", "replicate", "runwayml"]
    assert [s.is_configured for s in statuses] == [False, False, False, True]
    assert has_any_provider(APIKeys(runwayml="w"))
    assert not has_any_provider(APIKeys())


def test_from_env_and_merge(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
    monkeypatch.setenv("REPLICATE_API_TOKEN", "  ")
    env = APIKeys.from_env()
    assert env.openai == "sk-from-env"
    assert env.replicate is None

    merged = env.merge(APIKeys(openai="sk-stored", runwayml=None))
    assert merged.openai == "sk-stored"
    assert merged.runwayml is None


def test_from_dict_ignores_unknown_providers():
    keys = APIKeys.from_dict({"openai": "sk-x", "midjourney": "nope"})
    assert keys.openai == "sk-x"
    assert keys.get("midjourney") is None


def test_mask_api_key():
    assert mask_api_key("short") == "••••••••"
    assert mask_api_key(None) == "••••••••"
    masked = mask_api_key("sk-abcdefghijklmnop")
    assert masked.startswith("sk-a")
    assert masked.endswith("mnop")
    assert "•" in masked


def test_validate_api_key_format():
    assert validate_api_key_format("openai", "") == (False, "API key cannot be empty")
    assert validate_api_key_format("openai", "abc" * 10) == (
        False,
        'OpenAI keys should start with "sk-"',
    )
    assert validate_api_key_format("openai", "sk-short") == (False, "OpenAI key appears too short")
    assert validate_api_key_format("replicate", "r8_" + "x" * 10) == (
        False,
        "Replicate token appears too short",
    )
    assert validate_api_key_format("openai", "sk-" + "x" * 40) == (True, None)
    assert validate_api_key_format("runwayml", "k" * 25) == (True, None)
