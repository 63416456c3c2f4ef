from content_harvester.core.models import CleanedParam
from content_harvester.core.scraping.normalizer import clean_url
from content_harvester.rules import PatternCleanRule, build_clean_rules

SOPRANO = (
    "https://www.sopranodesign.com/secure-healthcare-messaging/"
    "?utm_source=twitter&utm_medium=socialmedia&utm_campaign=soprano"
)


def test_all_tracking_params_removed_leaves_no_query():
    cleaned, url = clean_url(SOPRANO, build_clean_rules())
    assert url == "https://www.sopranodesign.com/secure-healthcare-messaging/"
    assert [p.name for p in cleaned] == ["utm_source", "utm_medium", "utm_campaign"]
    assert all(p.reason == "Matched cleaner rule `^utm_`" for p in cleaned)


def test_remaining_params_are_kept_and_sorted():
    url = "https://example.com/a?z=1&utm_source=tw&b=2&b=1&a="
    cleaned, result = clean_url(url, build_clean_rules())
    assert cleaned == [CleanedParam("utm_source", "Matched cleaner rule `^utm_`")]
    assert result == "https://example.com/a?a=&b=2&b=1&z=1"


def test_fragment_is_preserved():
    _, result = clean_url("https://example.com/p?utm_medium=x&id=7#top", build_clean_rules())
    assert result == "https://example.com/p?id=7#top"


def test_untouched_url_is_returned_byte_identical():
    url = "https://example.com/p?Z=%7e&a=b+c"
    cleaned, result = clean_url(url, build_clean_rules())
    assert cleaned == []
    assert result is url


def test_cleaning_is_idempotent():
    rules = build_clean_rules()
    _, once = clean_url("https://example.com/?utm_term=x&q=search", rules)
    cleaned, twice = clean_url(once, rules)
    assert cleaned == []
    assert twice == once


def test_every_matching_rule_is_recorded_but_param_removed_once():
    rules = [PatternCleanRule(r"^utm_"), PatternCleanRule(r"source$")]
    cleaned, url = clean_url("https://example.com/?utm_source=a&utm_source=b&k=v", rules)
    assert [p.name for p in cleaned] == ["utm_source", "utm_source"]
    assert {p.reason for p in cleaned} == {
        "Matched cleaner rule `^utm_`",
        "Matched cleaner rule `source$`",
    }
    assert url == "https://example.com/?k=v"


def test_rule_gate_can_skip_url():
    rules = [PatternCleanRule(r"^utm_", url_pattern=r"^https://other\.example/")]
    url = "https://example.com/?utm_source=a"
    assert clean_url(url, rules) == ([], url)
