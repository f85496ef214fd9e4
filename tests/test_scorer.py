import pytest

from launchdeck.index import Index
from launchdeck.models import AppEntry
from launchdeck.scorer import is_penalized, score, similarity, weight_factor


def _entry(identifier, name, **kw):
    return AppEntry(identifier=identifier, name=name, exec=name.lower(), **kw)


@pytest.fixture
def browser_index():
    return Index([
        _entry("org.example.Firefox", "Firefox"),
        _entry("org.example.Files", "Files"),
        _entry("org.example.Calculator", "Calculator", keywords=("math",)),
        _entry("org.example.Terminal", "Terminal", categories=("System",)),
        _entry("org.example.Secret", "Secret Tool", hidden=True),
    ])


def test_misspelled_query_ranks_used_app_first(browser_index):
    """'firefx' (one dropped letter) finds Firefox, boosted by usage."""
    weights = {"org.example.Firefox": 5.0, "org.example.Files": 0.0}

    results = score("firefx", browser_index, weights=weights)

    assert results[0].entry.identifier == "org.example.Firefox"
    assert 0.0 < results[0].similarity < 1.0
    assert results[0].score > results[0].similarity


def test_exact_match_scores_one_and_beats_partial_matches(browser_index):
    results = score("Files", browser_index, weights={})

    assert results[0].entry.identifier == "org.example.Files"
    assert results[0].similarity == 1.0
    assert all(r.similarity < 1.0 for r in results[1:])


def test_empty_query_orders_by_usage_then_identifier(browser_index):
    weights = {"org.example.Terminal": 3.0, "org.example.Files": 1.0}

    results = score("", browser_index, weights=weights)

    assert [r.entry.identifier for r in results] == [
        "org.example.Terminal",
        "org.example.Files",
        "org.example.Calculator",
        "org.example.Firefox",
    ]


def test_hidden_entries_never_score(browser_index):
    assert all(r.entry.identifier != "org.example.Secret" for r in score("secret tool", browser_index, weights={}))


def test_unrelated_query_is_filtered_by_floor(browser_index):
    assert score("qqqqzzzz", browser_index, weights={}) == []


def test_scores_are_non_increasing(browser_index):
    results = score("fi", browser_index, weights={"org.example.Files": 2.0})

    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)
    assert all(0.0 <= r.similarity <= 1.0 for r in results)


def test_ties_broken_by_weight_then_identifier():
    index = Index([_entry("b.alpha", "Alpha"), _entry("a.alpha", "Alpha")])

    assert [r.entry.identifier for r in score("alpha", index, weights={})] == ["a.alpha", "b.alpha"]


def test_keyword_match_is_weighted_below_name_match(browser_index):
    results = score("math", browser_index, weights={})

    assert results[0].entry.identifier == "org.example.Calculator"
    assert results[0].similarity == pytest.approx(0.7)


def test_comment_match_ranks_below_name_match():
    mail = _entry("mail", "Mail")
    client = _entry("tb", "Thunderbird", comment="Send and receive mail")

    without_comment = score("mail", Index([mail, _entry("tb", "Thunderbird")]), weights={})
    results = score("mail", Index([mail, client]), weights={})

    assert [r.entry.identifier for r in without_comment] == ["mail"]
    assert [r.entry.identifier for r in results] == ["mail", "tb"]
    assert results[1].similarity <= 0.4


def test_limit_truncates(browser_index):
    assert len(score("", browser_index, weights={}, limit=2)) == 2


def test_usage_store_is_read_when_no_weights_given(browser_index, tmp_path):
    from launchdeck.usage import UsageStore

    usage = UsageStore(tmp_path / "usage.json")
    usage.record_launch("org.example.Calculator")

    assert score("", browser_index, usage)[0].entry.identifier == "org.example.Calculator"


def test_similarity_properties():
    assert similarity("firefox", "firefox") == 1.0
    assert similarity("", "firefox") == 0.0
    typo = similarity("firefx", "firefox")
    assert 0.7 < typo < 1.0
    assert similarity("fierfox", "firefox") < 1.0
    assert similarity("zzz", "firefox") < typo


def test_weight_factor_is_sublinear():
    assert weight_factor(0) == 1.0
    assert weight_factor(10) - weight_factor(9) < weight_factor(1) - weight_factor(0)


def test_terminal_and_settings_entries_are_penalized():
    assert is_penalized(_entry("htop", "htop", terminal=True))
    assert is_penalized(_entry("prefs", "Preferences", categories=("Settings",)))
    assert not is_penalized(_entry("files", "Files"))
