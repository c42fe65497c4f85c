from __future__ import annotations

import json

from comfyprompt.extraction.miner import iter_string_leaves, longest_string, mine_metadata


def test_string_leaves_follow_depth_first_pre_order() -> None:
    tree = {"a": "one", "b": [{"c": "two", "d": 3}, "three", None, True], "e": {"f": {"g": "four"}}}

    assert list(iter_string_leaves(tree)) == ["one", "two", "three", "four"]


def test_scalars_other_than_strings_are_not_candidates() -> None:
    assert list(iter_string_leaves([1, 2.5, False, None, {"n": 0}])) == []
    assert list(iter_string_leaves("bare")) == ["bare"]


def test_longest_string_keeps_first_on_ties() -> None:
    assert longest_string(["abc", "xyz", "ab"]) == "abc"
    assert longest_string([]) == ""


def test_nested_graph_selects_longest_leaf() -> None:
    text_chunks = {"prompt": json.dumps({"nodes": {"1": {"text": "a cat sitting"}, "2": {"text": "cat"}}})}

    mined = mine_metadata(text_chunks)

    assert mined.selected_text == "a cat sitting"
    assert mined.metadata == {"prompt": {"nodes": {"1": {"text": "a cat sitting"}, "2": {"text": "cat"}}}}


def test_raw_text_is_kept_and_competes_as_candidate() -> None:
    mined = mine_metadata({"parameters": "a long plain prompt, not json", "prompt": '{"t": "short"}'})

    assert mined.selected_text == "a long plain prompt, not json"
    assert mined.metadata == {"parameters": "a long plain prompt, not json", "prompt": {"t": "short"}}


def test_tie_across_keywords_prefers_insertion_order() -> None:
    mined = mine_metadata({"first": '["dog"]', "second": "cat"})

    assert mined.selected_text == "dog"


def test_non_standard_json_constants_fall_back_to_raw_text() -> None:
    mined = mine_metadata({"value": "NaN"})

    assert mined.metadata == {"value": "NaN"}
    assert mined.selected_text == "NaN"


def test_json_scalars_without_strings_yield_no_candidates() -> None:
    mined = mine_metadata({"seed": "12345", "flag": "true"})

    assert mined.selected_text == ""
    assert mined.metadata == {"seed": 12345, "flag": True}


def test_custom_selector_replaces_longest_heuristic() -> None:
    mined = mine_metadata(
        {"prompt": '{"positive": "a watercolor fox", "negative": "blurry, low quality, watermark"}'},
        selector=lambda candidates: next(iter(candidates), ""),
    )

    assert mined.selected_text == "a watercolor fox"
