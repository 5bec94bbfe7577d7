from unittest.mock import patch, MagicMock
import pytest
import requests

from avantebot.utils import (
    callback_data_fits,
    is_valid_image_url,
    probe_image_content_type,
    request_with_ssl_fallback,
    truncate_text,
    url_serves_image,
)


@pytest.mark.parametrize(
    "url",
    [
        "http://a.com/x.jpg",
        "https://b.com/y.PNG",
        "HTTPS://C.COM/Z.JPEG",
        "http://d.com/anim.gif",
        "https://e.com/pic.webp",
    ],
)
def test_is_valid_image_url_accepts_images(url):
    assert is_valid_image_url(url) is True


@pytest.mark.parametrize(
    "url",
    [
        None,
        "",
        "   ",
        "notanimage.txt",
        "ftp://a.com/x.jpg",
        "a.com/x.jpg",
        "http://a.com/x.jpg?size=large",
        "http://a.com/x.svg",
        "http://a.com/page.html",
        "http://",
        123,
    ],
)
def test_is_valid_image_url_rejects_everything_else(url):
    assert is_valid_image_url(url) is False


def test_truncate_text():
    assert truncate_text(None) == ""
    assert truncate_text("short", 10) == "short"
    assert truncate_text("a" * 20, 10) == "a" * 7 + "..."
    assert truncate_text("abcdef", 3) == "abc"


def test_callback_data_fits():
    assert callback_data_fits("NEXT_IMAGE:cats")
    assert callback_data_fits("x" * 64)
    assert not callback_data_fits("x" * 65)
    # multi-byte characters count by their UTF-8 size
    assert not callback_data_fits("ç" * 33)


def test_request_with_ssl_fallback_retries_without_verification():
    ok_response = MagicMock()
    with patch("requests.head") as mock_head:
        mock_head.side_effect = [requests.exceptions.SSLError("bad cert"), ok_response]
        response = request_with_ssl_fallback("https://a.com/x.jpg", method="head")

    assert response is ok_response
    assert mock_head.call_count == 2
    assert mock_head.call_args.kwargs["verify"] is False
    assert mock_head.call_args.kwargs["timeout"] == 5


def test_probe_image_content_type():
    response = MagicMock(status_code=200, headers={"Content-Type": "Image/JPEG; charset=binary"})
    with patch("requests.head", return_value=response):
        assert probe_image_content_type("http://a.com/x.jpg") == "image/jpeg"

    response = MagicMock(status_code=404, headers={})
    with patch("requests.head", return_value=response):
        assert probe_image_content_type("http://a.com/x.jpg") is None

    with patch("requests.head", side_effect=requests.exceptions.ConnectionError):
        assert probe_image_content_type("http://a.com/x.jpg") is None


def test_url_serves_image():
    with patch("avantebot.utils.links.probe_image_content_type") as mock_probe:
        mock_probe.return_value = "image/png"
        assert url_serves_image("http://a.com/x.png") is True

        mock_probe.return_value = None
        assert url_serves_image("http://a.com/x.png") is True

        mock_probe.return_value = "application/octet-stream"
        assert url_serves_image("http://a.com/x.png") is True

        mock_probe.return_value = "text/html"
        assert url_serves_image("http://a.com/x.png") is False
