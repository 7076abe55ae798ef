"""Tests for the difflib-backed fuzzy index."""

from scopesearch.search.fuzzy import SequenceMatcherIndex, field_values


def _index(items, fields=("name",), **kwargs):
    index = SequenceMatcherIndex(**kwargs)
    index.build(items, fields)
    return index


def test_substring_match_scores_zero():
    index = _index([{"name": "Blue Ocean Partners"}])

    hits = index.search("OCEAN")

    assert len(hits) == 1
    assert hits[0].score == 0.0
    assert hits[0].ref_index == 0


def test_typo_is_tolerated_but_scored_worse():
    index = _index([{"name": "Blue Ocean Partners"}])

    hits = index.search("partnrs")

    assert len(hits) == 1
    assert 0.0 < hits[0].score <= index.threshold


def test_unrelated_text_is_not_matched():
    index = _index([{"name": "Ocean View Trading"}])

    assert index.search("partners") == []


def test_queries_below_min_match_chars_return_nothing():
    index = _index([{"name": "X Ray Imaging"}])

    assert index.search("x") == []
    assert index.search("  ") == []


def test_results_sorted_by_score_then_position():
    index = _index(
        [
            {"name": "Harbor Partnrs"},
            {"name": "Partners Group"},
            {"name": "Global Partners"},
        ]
    )

    hits = index.search("partners")

    assert [hit.ref_index for hit in hits] == [1, 2, 0]


def test_best_field_wins_and_lists_are_searched():
    index = _index(
        [{"name": "Riverside Plant", "activities": ["bottling", "storage"]}],
        fields=("name", "activities"),
    )

    assert index.search("storage")[0].score == 0.0


def test_dotted_field_paths():
    item = {"owner": {"name": "Dana Ruiz"}, "tags": ["a", None, {"x": 1}, 3]}

    assert field_values(item, "owner.name") == ["Dana Ruiz"]
    assert field_values(item, "tags") == ["a", "3"]
    assert field_values(item, "owner") == []
    assert field_values(item, "missing.path") == []


def test_rebuild_replaces_items():
    index = _index([{"name": "Old Record"}])
    index.build([{"name": "New Record"}], ("name",))

    assert len(index) == 1
    assert index.search("old") == []
