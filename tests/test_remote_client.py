"""Tests for the HTTP remote preference client."""

import json

import httpx
import pytest

from accessibility_engine.core.exceptions import RemoteLoadError, RemoteWriteError
from accessibility_engine.core.ports import RemotePreferences
from accessibility_engine.remote.client import RemotePreferenceClient


def make_client(handler, api_key=""):
    transport = httpx.MockTransport(handler)
    return RemotePreferenceClient(
        "http://api.test/v1/",
        api_key=api_key,
        client=httpx.Client(transport=transport),
    )


class TestFetch:
    """Tests for RemotePreferenceClient.fetch."""

    def test_fetch_record(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(
                200,
                json={"onboarding_completed": True, "config": {"fontSize": 150}},
            )

        prefs = make_client(handler, api_key="secret").fetch("user-1")

        assert prefs == RemotePreferences(onboarding_completed=True, config={"fontSize": 150})
        assert requests[0].method == "GET"
        assert str(requests[0].url) == "http://api.test/v1/preferences/user-1"
        assert requests[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.parametrize(
        "identity,path",
        [
            ("team#1", b"/v1/preferences/team%231"),
            ("a/b?c", b"/v1/preferences/a%2Fb%3Fc"),
            ("ana maria", b"/v1/preferences/ana%20maria"),
        ],
    )
    def test_identity_is_encoded(self, identity, path):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(404 if request.method == "GET" else 204)

        client = make_client(handler)
        client.fetch(identity)
        client.save(identity, RemotePreferences(config={}))

        assert [r.url.raw_path for r in requests] == [path, path]
        assert all(r.url.query == b"" for r in requests)

    def test_missing_record(self):
        client = make_client(lambda request: httpx.Response(404))
        assert client.fetch("user-1") is None

    def test_record_without_flag(self):
        client = make_client(lambda request: httpx.Response(200, json={"config": {}}))
        prefs = client.fetch("user-1")
        assert prefs.onboarding_completed is None
        assert prefs.config == {}

    def test_malformed_config_is_dropped(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"onboarding_completed": False, "config": [1]})
        )
        prefs = client.fetch("user-1")
        assert prefs.onboarding_completed is False
        assert prefs.config == {}

    def test_server_error(self):
        client = make_client(lambda request: httpx.Response(500))
        with pytest.raises(RemoteLoadError) as exc_info:
            client.fetch("user-1")
        assert exc_info.value.status_code == 500

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RemoteLoadError):
            make_client(handler).fetch("user-1")

    def test_invalid_json(self):
        client = make_client(lambda request: httpx.Response(200, content=b"not json"))
        with pytest.raises(RemoteLoadError):
            client.fetch("user-1")

    def test_non_object_payload(self):
        client = make_client(lambda request: httpx.Response(200, json=[1, 2]))
        with pytest.raises(RemoteLoadError):
            client.fetch("user-1")


class TestSave:
    """Tests for RemotePreferenceClient.save."""

    def test_save_record(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(204)

        make_client(handler).save(
            "user-1",
            RemotePreferences(onboarding_completed=True, config={"lineFocus": True}),
        )

        assert requests[0].method == "PUT"
        assert json.loads(requests[0].content) == {
            "onboarding_completed": True,
            "config": {"lineFocus": True},
        }
        assert "Authorization" not in requests[0].headers

    def test_save_failure(self):
        client = make_client(lambda request: httpx.Response(503))
        with pytest.raises(RemoteWriteError) as exc_info:
            client.save("user-1", RemotePreferences())
        assert exc_info.value.status_code == 503
