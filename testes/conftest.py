import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
import requests

from tweet_importer.clients.api_client import RemoteApiClient
from tweet_importer.import_tool import MediaImportTool
from tweet_importer.settings import ImporterSettings
from tweet_importer.sideloader import MediaSideloader
from tweet_importer.storage.memory import InMemoryStorage

API_URL = "http://api.test"

_NO_JSON = object()


class FakeResponse:
    def __init__(self, status_code=200, json_data=_NO_JSON, content=b""):
        self.status_code = status_code
        self._json = json_data
        self.content = content

    def json(self):
        if self._json is _NO_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Answers GET requests from a url -> response (or exception) table."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, url, response=None, **kwargs):
        self.routes[url] = response if response is not None else FakeResponse(**kwargs)

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        answer = self.routes.get(url)
        if answer is None:
            raise requests.ConnectionError(f"No route to {url}")
        if isinstance(answer, Exception):
            raise answer
        return answer

    @property
    def urls(self):
        return [url for url, _ in self.calls]


@pytest.fixture
def response():
    return FakeResponse


@pytest.fixture
def settings(tmp_path):
    return ImporterSettings(api_base_url=API_URL, report_dir=str(tmp_path / "reports"))


@pytest.fixture
def storage():
    return InMemoryStorage(site_url="http://site.test")


@pytest.fixture
def api_session():
    return FakeSession()


@pytest.fixture
def download_session():
    return FakeSession()


@pytest.fixture
def make_tool(storage, api_session, download_session):
    def build(settings):
        client = RemoteApiClient(settings.api_base_url, session=api_session)
        sideloader = MediaSideloader(storage, session=download_session)
        return MediaImportTool(settings, storage=storage, client=client, sideloader=sideloader)

    return build


@pytest.fixture
def tool(make_tool, settings):
    return make_tool(settings)
