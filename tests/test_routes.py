"""HTTP behaviour of the gateway routes."""

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from redirector.config import ConfigurationError, Settings
from redirector.main import create_app

IPHONE_IOS8 = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 8_0 like Mac OS X) AppleWebKit/600.1.4 "
    "(KHTML, like Gecko) Version/8.0 Mobile/12A365 Safari/600.1.4"
)
IPHONE_IOS7 = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 7_1_2 like Mac OS X) AppleWebKit/537.51.2 "
    "(KHTML, like Gecko) Version/7.0 Mobile/11D257 Safari/9537.53"
)
ANDROID_CHROME = (
    "Mozilla/5.0 (Linux; Android 5.0; Nexus 5 Build/LRX21O) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/37.0.0.0 Mobile Safari/537.36"
)
ANDROID_OLD = (
    "Mozilla/5.0 (Linux; Android 4.4.2; Nexus 5 Build/KOT49H) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/32.0.1700.99 Mobile Safari/537.36"
)
ANDROID_TABLET = (
    "Mozilla/5.0 (Linux; Android 6.0.1; SM-T810 Build/MMB29M) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/56.0.2924.87 Safari/537.36"
)
WINDOWS_CHROME = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

APP_STORE = "https://apps.example.com/app/id1"
PLAY_STORE = "https://play.example.com/store/apps/details?id=com.example"


def make_settings(**overrides):
    values = dict(app_store_url=APP_STORE, play_store_url=PLAY_STORE)
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client():
    with TestClient(create_app(make_settings())) as client:
        yield client


def get(client, path, user_agent):
    return client.get(path, headers={"User-Agent": user_agent}, follow_redirects=False)


def test_iphone_redirects_to_app_store(client):
    response = get(client, "/", IPHONE_IOS8)
    assert response.status_code == 302
    assert response.headers["location"] == APP_STORE


def test_android_redirects_to_play_store(client):
    response = get(client, "/", ANDROID_CHROME)
    assert response.status_code == 302
    assert response.headers["location"] == PLAY_STORE


@pytest.mark.parametrize("user_agent", [IPHONE_IOS7, ANDROID_OLD, ANDROID_TABLET, WINDOWS_CHROME, ""])
def test_fallback_page(client, user_agent):
    response = get(client, "/", user_agent)
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert APP_STORE in response.text
    assert PLAY_STORE in response.text


def test_debug_echoes_decision(client):
    response = get(client, "/debug", IPHONE_IOS8)
    assert response.status_code == 200
    assert "Platform: iPhone" in response.text
    assert "Result: IOS version is supported" in response.text
    assert f"Redirect to Apple App store:  {APP_STORE}" in response.text
    assert "Duration:" in response.text


def test_debug_android_message_uses_android_threshold():
    settings = make_settings(min_ios_version=11.0, min_android_version=6.0)
    with TestClient(create_app(settings)) as client:
        response = get(client, "/debug", ANDROID_CHROME)
    assert "Needs to be a mobile device with at least version 6.000000" in response.text
    assert "Display custom page" in response.text


def test_debug_does_not_leak_into_root(client):
    get(client, "/debug", ANDROID_CHROME)
    response = get(client, "/", ANDROID_CHROME)
    assert response.status_code == 302


def test_debug_can_be_disabled():
    with TestClient(create_app(make_settings(debug_enabled=False))) as client:
        assert get(client, "/debug", IPHONE_IOS8).status_code == 404


def test_classify_api_query_overrides_header(client):
    response = client.get("/api/classify", params={"ua": ANDROID_CHROME}, headers={"User-Agent": WINDOWS_CHROME})
    assert response.status_code == 200
    assert response.json() == {
        "outcome": "redirect_to_play_store",
        "platform": "android",
        "version": 5.0,
        "redirect_url": PLAY_STORE,
    }


def test_classify_api_fallback(client):
    body = client.get("/api/classify", headers={"User-Agent": WINDOWS_CHROME}).json()
    assert body["outcome"] == "show_fallback"
    assert body["redirect_url"] is None


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


@pytest.mark.parametrize("pattern", ["OS ((", r"OS \d+_\d+"])
def test_invalid_pattern_rejected_by_settings(pattern):
    with pytest.raises(ValidationError):
        make_settings(ios_version_pattern=pattern)


def test_invalid_pattern_raises_configuration_error():
    settings = Settings.model_construct(ios_version_pattern="OS ((")
    with pytest.raises(ConfigurationError):
        settings.version_patterns()


def test_invalid_pattern_stops_startup():
    app = create_app(Settings.model_construct(ios_version_pattern="OS (("))
    with pytest.raises(ConfigurationError):
        with TestClient(app):
            pass


def test_log_level_is_validated():
    assert make_settings(log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        make_settings(log_level="LOUD")
