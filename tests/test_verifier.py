import pytest
import requests

from storefront.services import verifier_client
from storefront.services.verifier_client import VerifierClient


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self):
        return self.payload


@pytest.fixture
def post(monkeypatch):
    calls = []
    responses = []

    def _post(url, data=None, timeout=None):
        calls.append({"url": url, "data": data, "timeout": timeout})
        result = responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(verifier_client.requests, "post", _post)
    _post.calls = calls
    _post.responses = responses
    return _post


def client(**kwargs):
    kwargs.setdefault("enabled", True)
    return VerifierClient(verify_url="https://verify.test/siteverify", secret="s3cret", **kwargs)


class TestVerifierClient:
    def test_disabled_always_passes(self, post):
        assert client(enabled=False).verify(None) is True
        assert post.calls == []

    def test_missing_token_fails_without_request(self, post):
        assert client().verify("") is False
        assert post.calls == []

    def test_accepted_token(self, post):
        post.responses.append(FakeResponse({"success": True}))

        assert client().verify("tok", remote_ip="10.0.0.1") is True
        assert post.calls[0]["data"] == {"secret": "s3cret", "response": "tok", "remoteip": "10.0.0.1"}

    def test_rejected_token(self, post):
        post.responses.append(FakeResponse({"success": False, "error-codes": ["invalid-input-response"]}))

        assert client().verify("tok") is False

    def test_network_errors_are_retried(self, post):
        post.responses.extend([requests.ConnectionError("boom"), FakeResponse({"success": True})])

        assert client().verify("tok") is True
        assert len(post.calls) == 2

    def test_gives_up_after_three_attempts(self, post):
        post.responses.extend([requests.Timeout("slow")] * 3)

        with pytest.raises(requests.Timeout):
            client().verify("tok")
        assert len(post.calls) == 3
