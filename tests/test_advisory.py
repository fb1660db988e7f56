import numpy as np
import pytest
import requests

from thermalsentinel.config import API_KEY_ENV_VARS, resolve_api_key
from thermalsentinel.controller.advisory import (
    MISSING_KEY_MESSAGE, NO_ANALYSIS_MESSAGE, SERVICE_ERROR_MESSAGE, AdvisoryClient, AdvisoryError,
    MissingCredentialError, build_prompt, run_advisory
)

from conftest import make_alert
from fakes import FakeResponse, FakeSession

ANSWER = {"candidates": [{"content": {"parts": [{"text": "Bearing friction. "}, {"text": "Inspect lubrication."}]}}]}


@pytest.fixture(autouse=True)
def no_env_key(monkeypatch):
    for name in API_KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_prompt_without_frame():
    prompt = build_prompt(make_alert(1_700_000_000, max_temp=72.4))
    assert "72.4" in prompt
    assert "not available" in prompt
    assert "scan_001" in prompt
    assert "a1b2c3-turbine" in prompt


def test_prompt_uses_frame_statistics(make_frame):
    frame = make_frame(np.array([[30.0, 40.0], [50.0, 81.5]]))
    prompt = build_prompt(make_alert(1_700_000_000), frame)
    assert "81.5" in prompt
    assert "51.5" in prompt  # differential


def test_missing_key_short_circuits():
    session = FakeSession()
    client = AdvisoryClient(api_key=None, session=session)
    with pytest.raises(MissingCredentialError):
        client.analyse("anything")
    assert run_advisory(make_alert(0), client=client) == MISSING_KEY_MESSAGE
    assert session.calls == []


def test_successful_analysis():
    session = FakeSession({":generateContent": FakeResponse(ANSWER)})
    client = AdvisoryClient(api_key="secret", session=session)
    text = run_advisory(make_alert(1_700_000_000), client=client)
    assert text == "Bearing friction. Inspect lubrication."
    _method, _url, kwargs = session.calls[0]
    assert kwargs["headers"]["x-goog-api-key"] == "secret"
    assert "Turbine ID: a1b2c3-turbine" in kwargs["json"]["contents"][0]["parts"][0]["text"]


def test_empty_candidates():
    session = FakeSession({":generateContent": FakeResponse({"candidates": []})})
    assert AdvisoryClient(api_key="secret", session=session).analyse("p") == NO_ANALYSIS_MESSAGE


@pytest.mark.parametrize("response", [
    FakeResponse({"error": "quota"}, status_code=429, reason="Too Many Requests"),
    requests.Timeout("slow"),
])
def test_service_errors(response):
    client = AdvisoryClient(api_key="secret", session=FakeSession({":generateContent": response}))
    with pytest.raises(AdvisoryError):
        client.analyse("p")
    assert run_advisory(make_alert(0), client=client) == SERVICE_ERROR_MESSAGE


def test_resolve_api_key_prefers_environment(monkeypatch):
    assert resolve_api_key(None) is None
    assert resolve_api_key("  ") is None
    assert resolve_api_key("remote") == "remote"
    monkeypatch.setenv(API_KEY_ENV_VARS[-1], "from-env")
    assert resolve_api_key("remote") == "from-env"
