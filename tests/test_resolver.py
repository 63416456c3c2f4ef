import pytest
import requests

from content_harvester.core.scraping.downloader import Downloader
from content_harvester.core.scraping.resolver import ResourceResolver, classify_response

SOPRANO = (
    "https://www.sopranodesign.com/secure-healthcare-messaging/"
    "?utm_source=twitter&utm_medium=socialmedia&utm_campaign=soprano"
)

META_REFRESH = (
    '<html><head><meta http-equiv="refresh" content="0; url=https://example.com/x">'
    "</head><body>moved</body></html>"
)


def _resolver(fetcher, tmp_path, **kwargs):
    return ResourceResolver(
        fetcher=fetcher, downloader=Downloader(fetcher=fetcher, dest_dir=str(tmp_path)), **kwargs
    )


def test_unfetchable_url_is_invalid(tmp_path, make_fetcher):
    res = _resolver(make_fetcher(), tmp_path).resolve("https://t")

    assert res.is_valid() == (False, False)
    ignored, reason = res.is_ignored()
    assert ignored is True
    assert "https://t" in reason
    assert res.http_status_code is None
    assert res.content is None
    assert res.disposition() == "invalid_url"


def test_timeout_is_an_invalid_url(tmp_path, make_fetcher):
    fetcher = make_fetcher({"https://slow.example/": requests.Timeout("read timed out")})
    res = _resolver(fetcher, tmp_path).resolve("https://slow.example/")
    assert res.url_valid is False
    assert res.ignore_reason == "Invalid URL 'https://slow.example/'"


def test_non_200_status_is_an_invalid_destination(tmp_path, make_fetcher, dummy_response):
    url = "https://httpbin.org/status/404"
    resp = dummy_response(url, status_code=404, body="nope")
    res = _resolver(make_fetcher({url: resp}), tmp_path).resolve(url)

    assert res.is_valid() == (True, False)
    assert res.http_status_code == 404
    assert res.is_ignored() == (True, "Invalid HTTP Status Code 404")
    assert res.content is None
    assert res.disposition() == "invalid_destination"
    assert resp.closed is True


def test_shortened_link_is_ignored_by_destination(tmp_path, make_fetcher, dummy_response):
    short = "https://t.co/csWpQq5mbn"
    status = "https://twitter.com/Live5News/status/983662615370436609"
    fetcher = make_fetcher({short: dummy_response(status, body="<html></html>")})
    res = _resolver(fetcher, tmp_path).resolve(short)

    assert res.is_valid() == (True, True)
    assert res.http_status_code == 200
    assert res.is_ignored() == (
        True,
        "Matched Ignore Rule `^https://twitter.com/(.*?)/status/(.*)$`",
    )
    assert res.resolved_url == status
    assert res.cleaned_params == []
    assert res.content is None
    assert res.disposition() == "ignored"


def test_tracking_params_are_cleaned(tmp_path, make_fetcher, dummy_response):
    short = "https://bit.ly/2Hc9v0n"
    fetcher = make_fetcher({short: dummy_response(SOPRANO, body="<html><head></head></html>")})
    res = _resolver(fetcher, tmp_path).resolve(short)

    final, resolved, cleaned = res.get_urls()
    assert resolved == SOPRANO
    assert cleaned == "https://www.sopranodesign.com/secure-healthcare-messaging/"
    assert final == cleaned
    assert "?" not in final
    assert res.is_cleaned() == (True, cleaned)
    assert [p.name for p in res.cleaned_params] == ["utm_source", "utm_medium", "utm_campaign"]
    assert res.disposition() == "harvested"


def test_untouched_url_keeps_resolved_form(tmp_path, make_fetcher, dummy_response):
    url = "https://example.com/p?Z=%7e&a=b+c"
    res = _resolver(make_fetcher({url: dummy_response(url, body="<p>hi</p>")}), tmp_path).resolve(url)
    assert res.cleaned is False
    assert res.cleaned_url is None
    assert res.final_url == url


def test_html_meta_refresh_is_detected(tmp_path, make_fetcher, dummy_response):
    url = "https://example.com/meta"
    resp = dummy_response(url, body=META_REFRESH)
    res = _resolver(make_fetcher({url: resp}), tmp_path).resolve(url)

    assert res.is_html_redirect() == (True, "https://example.com/x")
    assert res.content.is_html()
    assert res.content.media_type_params == {"charset": "utf-8"}
    assert res.content.was_downloaded() is False
    assert res.html_parse_error is None
    assert resp.closed is True


def test_html_without_refresh(tmp_path, make_fetcher, dummy_response):
    url = "https://example.com/plain"
    res = _resolver(
        make_fetcher({url: dummy_response(url, body="<html><head><title>t</title></head></html>")}),
        tmp_path,
    ).resolve(url)
    assert res.is_html_redirect() == (False, None)


def test_octet_stream_pdf_is_downloaded_and_sniffed(tmp_path, make_fetcher, dummy_response, pdf_bytes):
    url = "http://ceur-ws.org/Vol-1401/paper-05.pdf"
    resp = dummy_response(url, body=pdf_bytes, content_type="application/octet-stream")
    res = _resolver(make_fetcher({url: resp}), tmp_path).resolve(url)

    content = res.content
    assert content.media_type == "application/octet-stream"
    assert content.was_downloaded()
    assert content.downloaded.extension == "pdf"
    assert content.downloaded.dest_path.endswith(".pdf")
    assert content.is_valid()
    content.downloaded.delete()


def test_missing_content_type_is_downloaded(tmp_path, make_fetcher, dummy_response, png_bytes):
    url = "https://example.com/img"
    resp = dummy_response(url, body=png_bytes, content_type=None)
    res = _resolver(make_fetcher({url: resp}), tmp_path).resolve(url)

    content = res.content
    assert content.media_type_error is not None
    assert content.is_valid() is False
    assert content.downloaded.extension == "png"
    assert res.disposition() == "harvested"


def test_bare_domain_is_fetched_with_default_scheme(tmp_path, make_fetcher, dummy_response):
    fetcher = make_fetcher({"http://example.org": dummy_response("https://example.org/", body="<p/>")})
    res = _resolver(fetcher, tmp_path).resolve("example.org")

    assert fetcher.calls == ["http://example.org"]
    assert res.original_url_text == "example.org"
    assert res.resolved_url == "https://example.org/"


def test_custom_rules_are_used(tmp_path, make_fetcher, dummy_response):
    from content_harvester.rules import PatternCleanRule, PatternIgnoreRule

    url = "https://news.example/a?ref=tw&id=1"
    fetcher = make_fetcher({url: dummy_response(url, body="<p/>")})
    resolver = _resolver(
        fetcher,
        tmp_path,
        ignore_rules=[PatternIgnoreRule(r"^https://ads\.")],
        clean_rules=[PatternCleanRule(r"^ref$", reason="referral tag")],
    )
    res = resolver.resolve(url)
    assert res.final_url == "https://news.example/a?id=1"
    assert res.cleaned_params[0].reason == "referral tag"


def test_classify_response_keeps_html_in_memory(dummy_response):
    class ExplodingDownloader:
        def save_response(self, url, resp):
            raise AssertionError("HTML must not be downloaded")

    resp = dummy_response("https://example.com/", body="<p/>", content_type="TEXT/HTML")
    content = classify_response("https://example.com/", resp, ExplodingDownloader())
    assert content.is_html()
    assert content.downloaded is None


@pytest.mark.parametrize("content_type", ["text/html; charset", "text/html; charset=utf-8, text/html"])
def test_html_with_bad_parameters_is_not_downloaded(tmp_path, make_fetcher, dummy_response, content_type):
    url = "https://example.com/folded"
    body = "<html><head><meta http-equiv='refresh' content='2;url=https://example.com/x'></head></html>"
    resp = dummy_response(url, body=body, content_type=content_type)
    res = _resolver(make_fetcher({url: resp}), tmp_path).resolve(url)

    content = res.content
    assert content.media_type == "text/html"
    assert content.media_type_error is not None
    assert content.is_html()
    assert content.was_downloaded() is False
    assert res.is_html_redirect() == (True, "https://example.com/x")
    assert list(tmp_path.iterdir()) == []
