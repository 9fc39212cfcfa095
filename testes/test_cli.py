import pytest

from tweet_importer.cli import build_parser, main


def test_parser_defaults():
    args = build_parser().parse_args(["fetch-media", "123"])
    assert args.by == "status"
    args = build_parser().parse_args(["create-post", "bob"])
    assert (args.post_title, args.post_status, args.post_author) == (None, "draft", 1)


def test_fetch_media_prints_details(tool, api_session, capsys):
    api_session.add(
        "http://api.test/media2/42",
        json_data={"response": {"type": "video", "download_url": "http://x/v.mp4", "thumbnail": "http://x/p.jpg"}},
    )

    assert main(["fetch-media", "https://x.com/u/status/42"], tool=tool) == 0

    out = capsys.readouterr().out
    assert "Type: video" in out
    assert "URL: http://x/v.mp4" in out
    assert "Poster: http://x/p.jpg" in out


def test_fetch_media_error_exits_with_one(tool, capsys):
    assert main(["fetch-media", "bob", "--by", "user"], tool=tool) == 1
    assert capsys.readouterr().err.startswith("Error: ")


def test_create_post(tool, storage, api_session, capsys):
    api_session.add("http://api.test/latest/bob", json_data={"response": {"type": "image", "download_url": "http://x/i.jpg"}})

    assert main(["create-post", "bob", "--post-title", "Hello", "--post-status", "publish"], tool=tool) == 0

    post = storage.get_post(1)
    assert (post.title, post.status) == ("Hello", "publish")
    assert "Successfully created post #1." in capsys.readouterr().out


def test_import_file(tool, api_session, tmp_path, capsys):
    api_session.add("http://api.test/media2/1", json_data={"response": {"type": "image", "download_url": "http://x/1.jpg"}})
    path = tmp_path / "lines.txt"
    path.write_text("1|First\n2|Second\n", encoding="utf-8")

    assert main(["import-file", str(path)], tool=tool) == 1
    assert "1 succeeded, 1 failed" in capsys.readouterr().out


def test_unknown_command_exits():
    with pytest.raises(SystemExit):
        main(["explode"])
