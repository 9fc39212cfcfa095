import pytest

from tweet_importer.extractors.media_extractor import (
    content_as_string,
    extract_status_id,
    find_media_list,
    find_poster_url,
    format_media_response,
    normalize_single,
    search_results_from_list,
)
from tweet_importer.models import MediaDescriptor
from tweet_importer.utils.errors import NoMediaFoundError, UnsupportedMediaError


@pytest.mark.parametrize(
    "value",
    [
        "https://x.com/someuser/status/1234567890",
        "https://www.twitter.com/someuser/statuses/1234567890",
        "http://mobile.twitter.com/someuser/status/1234567890?s=20",
        "https://m.x.com/#!/someuser/status/1234567890",
        "see https://twitter.com/someuser/status/1234567890 for details",
    ],
)
def test_status_id_extracted_from_urls(value):
    assert extract_status_id(value) == "1234567890"


def test_status_id_passthrough_without_status_path():
    assert extract_status_id("1234567890") == "1234567890"
    assert extract_status_id("https://x.com/someuser") == "https://x.com/someuser"
    assert extract_status_id("https://example.com/u/status/99") == "https://example.com/u/status/99"


def test_media_list_top_level_and_nested():
    items = [{"tweet_id": "1"}, {"tweet_id": "2"}]
    assert find_media_list(items) == items
    assert find_media_list({"meta": {"count": 2}, "videos": items}) == items


def test_media_list_unknown_shape_is_empty():
    assert find_media_list({"videos": [{"id": "1"}]}) == []
    assert find_media_list({"a": {"b": [{"tweet_id": "1"}]}}) == []
    assert find_media_list("nope") == []
    assert find_media_list(None) == []


def test_search_results_flag_imported_items():
    items = [
        {"tweet_id": "1", "username": "alice", "views": 10, "thumbnail": "http://x/1.jpg", "download_url": "http://x/1.mp4"},
        {"tweet_id": 2},
    ]
    results = search_results_from_list(items, {"2": "http://site.test/?p=9"})
    assert [r.id for r in results] == ["1", "2"]
    assert results[0].is_imported is False and results[0].post_url is None
    assert results[0].user_name == "alice"
    assert results[1].is_imported is True
    assert results[1].post_url == "http://site.test/?p=9"
    assert results[1].model_dump(by_alias=True)["userName"] == ""


def test_video_response_round_trip():
    payload = {"response": {"type": "video", "download_url": "http://x/v.mp4", "thumbnail": "http://x/p.jpg"}}
    media = normalize_single(payload)
    assert media.to_content_dict() == {"type": "video", "src": "http://x/v.mp4", "poster": "http://x/p.jpg"}


def test_image_response_has_no_poster():
    media = format_media_response({"type": "image", "download_url": "http://x/i.jpg"})
    assert media.to_content_dict() == {"type": "image", "src": "http://x/i.jpg"}


@pytest.mark.parametrize(
    "response",
    [
        {"type": "video", "download_url": "http://x/v.mp4"},
        {"type": "video", "thumbnail": "http://x/p.jpg"},
        {"type": "video", "download_url": "", "thumbnail": "http://x/p.jpg"},
        {"type": "video", "download_url": "javascript:alert(1)", "thumbnail": "http://x/p.jpg"},
        {"type": "image"},
        {"type": "gif", "download_url": "http://x/a.gif"},
        {"download_url": "http://x/v.mp4"},
    ],
)
def test_unsupported_media(response):
    with pytest.raises(UnsupportedMediaError):
        format_media_response(response)


def test_empty_single_response_is_no_media_found():
    with pytest.raises(NoMediaFoundError):
        normalize_single({"response": {}})
    with pytest.raises(NoMediaFoundError):
        normalize_single({"status": "ok"})
    with pytest.raises(NoMediaFoundError):
        normalize_single([])


def test_content_strings_are_escaped():
    video = MediaDescriptor(type="video", src="http://x/v.mp4?a=1&b=2", poster="http://x/p.jpg")
    assert content_as_string(video) == '[video src="http://x/v.mp4?a=1&amp;b=2" poster="http://x/p.jpg"]'
    image = MediaDescriptor(type="image", src="http://x/i.jpg")
    assert content_as_string(image, 'Say "hi"') == '<img src="http://x/i.jpg" alt="Say &quot;hi&quot;" />'


def test_find_poster_url():
    content = '[video src="http://site/v.mp4" poster="http://site/p.jpg?a=1&amp;b=2"]'
    assert find_poster_url(content) == "http://site/p.jpg?a=1&b=2"
    assert find_poster_url('<img src="http://site/i.jpg" />') is None
    assert find_poster_url('[video poster=""]') is None
