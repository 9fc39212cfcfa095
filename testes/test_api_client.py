import pytest
import requests

from tweet_importer.clients.api_client import RemoteApiClient
from tweet_importer.utils.errors import ConfigError, DecodeError, TransportError


def test_get_joins_base_url_and_sends_headers(api_session, response):
    api_session.add("http://api.test/search/cats", json_data=[{"tweet_id": "1"}])
    client = RemoteApiClient("http://api.test", timeout=60, user_agent="UA/1", session=api_session)

    assert client.get("search/cats") == [{"tweet_id": "1"}]
    url, kwargs = api_session.calls[0]
    assert url == "http://api.test/search/cats"
    assert kwargs["timeout"] == 60
    assert kwargs["headers"] == {"Accept": "application/json", "User-Agent": "UA/1"}


def test_missing_base_url_fails_before_network(api_session):
    client = RemoteApiClient("", session=api_session)
    with pytest.raises(ConfigError) as exc:
        client.get("search/cats")
    assert exc.value.code == "missing_api_url"
    assert api_session.calls == []


def test_timeout_is_transport_error(api_session):
    api_session.add("http://api.test/latest/bob", requests.Timeout("slow"))
    client = RemoteApiClient("http://api.test/", session=api_session)
    with pytest.raises(TransportError):
        client.get("latest/bob")


def test_connection_error_is_transport_error(api_session):
    client = RemoteApiClient("http://api.test/", session=api_session)
    with pytest.raises(TransportError):
        client.get("latest/nobody")


def test_http_error_status_is_transport_error(api_session, response):
    api_session.add("http://api.test/media2/1", response(status_code=502, json_data={"error": "bad gateway"}))
    client = RemoteApiClient("http://api.test", session=api_session)
    with pytest.raises(TransportError) as exc:
        client.get("media2/1")
    assert "502" in exc.value.message


def test_non_json_body_is_decode_error(api_session, response):
    api_session.add("http://api.test/media2/1", response(content=b"<html>"))
    client = RemoteApiClient("http://api.test", session=api_session)
    with pytest.raises(DecodeError) as exc:
        client.get("media2/1")
    assert exc.value.code == "json_decode_error"
