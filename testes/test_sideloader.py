import os

import pytest
import requests

from tweet_importer.sideloader import MediaSideloader, filename_from_url
from tweet_importer.utils.errors import AttachFailedError, DownloadFailedError, StorageError


def test_filename_from_url():
    assert filename_from_url("https://cdn.test/media/abc.mp4?tag=12") == "abc.mp4"
    assert filename_from_url("https://cdn.test/media/my%20clip.mp4") == "my_clip.mp4"
    assert filename_from_url("https://cdn.test/") == "download"


def test_sideload_registers_file(storage, download_session, response):
    post_id = storage.create_post(title="p")
    download_session.add("https://cdn.test/v.mp4", response(content=b"video-bytes"))
    sideloader = MediaSideloader(storage, timeout=120, session=download_session)

    attachment_id = sideloader.sideload("https://cdn.test/v.mp4", post_id)

    assert storage.attachments[attachment_id]["data"] == b"video-bytes"
    assert storage.attachments[attachment_id]["post_id"] == post_id
    assert storage.get_attachment_url(attachment_id) == "http://site.test/wp-content/uploads/v.mp4"
    _, kwargs = download_session.calls[0]
    assert kwargs["timeout"] == 120
    assert kwargs["stream"] is True


def test_each_call_creates_new_attachment(storage, download_session, response):
    download_session.add("https://cdn.test/p.jpg", response(content=b"img"))
    sideloader = MediaSideloader(storage, session=download_session)
    first = sideloader.sideload("https://cdn.test/p.jpg")
    second = sideloader.sideload("https://cdn.test/p.jpg")
    assert first != second
    assert len(storage.attachments) == 2


@pytest.mark.parametrize("failure", [requests.Timeout("slow"), requests.ConnectionError("down")])
def test_download_failure_leaves_nothing(storage, download_session, failure, tmp_path, monkeypatch):
    monkeypatch.setattr("tempfile.tempdir", str(tmp_path))
    download_session.add("https://cdn.test/v.mp4", failure)
    sideloader = MediaSideloader(storage, session=download_session)

    with pytest.raises(DownloadFailedError):
        sideloader.sideload("https://cdn.test/v.mp4")
    assert storage.attachments == {}
    assert os.listdir(tmp_path) == []


def test_http_error_is_download_failure(storage, download_session, response):
    download_session.add("https://cdn.test/v.mp4", response(status_code=404))
    with pytest.raises(DownloadFailedError):
        MediaSideloader(storage, session=download_session).sideload("https://cdn.test/v.mp4")


def test_attach_failure_removes_temporary_file(storage, download_session, response, tmp_path, monkeypatch):
    monkeypatch.setattr("tempfile.tempdir", str(tmp_path))
    download_session.add("https://cdn.test/v.mp4", response(content=b"data"))
    seen = []

    def refuse(path, filename, post_id=None):
        seen.append(path)
        raise StorageError("disk full")

    monkeypatch.setattr(storage, "register_attachment", refuse)
    with pytest.raises(AttachFailedError) as exc:
        MediaSideloader(storage, session=download_session).sideload("https://cdn.test/v.mp4")

    assert "disk full" in exc.value.message
    assert seen and not os.path.exists(seen[0])
    assert os.listdir(tmp_path) == []
