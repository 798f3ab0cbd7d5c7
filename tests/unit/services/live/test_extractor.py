"""
Unit tests for the HTML/JSON extraction helpers.

Tests cover:
- Named JSON extraction (assignment, quoted key, nested braces, misses)
- Locale-grouped number parsing
- Depth-bounded concurrent viewer search
- Live-now indicators and video ID literals
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from streamscout.services.live.extractor import (
    extract_named_json,
    extract_named_json_result,
    extract_number_from_free_text,
    extract_watching_now_from_html,
    find_concurrent_viewers,
    find_concurrent_viewers_result,
    find_video_id_in_html,
    is_live_now_indicated,
    live_now_indicators,
)

VIDEO_ID = "jfKfPfyJRdk"


class TestExtractNamedJson:
    """Tests for extract_named_json and extract_named_json_result."""

    def test_var_assignment(self) -> None:
        html = '<script>var ytInitialData = {"a":{"b":1}};</script>'
        assert extract_named_json(html, "ytInitialData") == {"a": {"b": 1}}

    def test_assignment_without_var(self) -> None:
        html = '<script>ytInitialPlayerResponse = {"videoDetails":{"title":"x"}};</script>'
        result = extract_named_json_result(html, "ytInitialPlayerResponse")
        assert result.value == {"videoDetails": {"title": "x"}}
        assert result.strategy == "assignment"

    def test_window_bracket_assignment(self) -> None:
        html = '<script>window["ytInitialData"] = {"k":[1,2,3]};</script>'
        assert extract_named_json(html, "ytInitialData") == {"k": [1, 2, 3]}

    def test_quoted_key(self) -> None:
        html = '{"ytInitialPlayerResponse": {"playabilityStatus":{"status":"OK"}}, "other": 1}'
        result = extract_named_json_result(html, "ytInitialPlayerResponse")
        assert result.value == {"playabilityStatus": {"status": "OK"}}
        assert result.strategy == "quoted_key"

    def test_nested_terminators_inside_object(self) -> None:
        """A nested '};' must not cut the object short."""
        html = 'var ytInitialData = {"a":{"b":{"c":1}},"s":"x};y"};var next = 1;'
        assert extract_named_json(html, "ytInitialData") == {
            "a": {"b": {"c": 1}},
            "s": "x};y",
        }

    def test_braces_inside_strings_are_ignored(self) -> None:
        html = 'var ytInitialData = {"text":"{not a brace}","n":2};'
        assert extract_named_json(html, "ytInitialData") == {"text": "{not a brace}", "n": 2}

    def test_escaped_quotes_inside_strings(self) -> None:
        html = r'var ytInitialData = {"text":"say \"hi\" {","n":3};'
        assert extract_named_json(html, "ytInitialData") == {"text": 'say "hi" {', "n": 3}

    def test_escaped_backslash_before_closing_quote(self) -> None:
        html = r'var ytInitialData = {"path":"C:\\","n":{"m":1}};var other = {};'
        assert extract_named_json(html, "ytInitialData") == {"path": "C:\\", "n": {"m": 1}}

    def test_unterminated_string_is_a_miss(self) -> None:
        assert extract_named_json('var ytInitialData = {"a":"open};', "ytInitialData") is None

    def test_empty_html_is_a_miss(self) -> None:
        result = extract_named_json_result("", "ytInitialData")
        assert result.value is None
        assert result.miss_reason == "empty_html"

    def test_missing_name_is_a_miss(self) -> None:
        result = extract_named_json_result("<html></html>", "ytInitialData")
        assert not result.found
        assert result.miss_reason == "name_not_present"

    def test_malformed_json_is_a_miss(self) -> None:
        html = "var ytInitialData = {not: valid json};"
        result = extract_named_json_result(html, "ytInitialData")
        assert result.value is None
        assert result.miss_reason == "unparseable"

    def test_unterminated_object_is_a_miss(self) -> None:
        assert extract_named_json('var ytInitialData = {"a": 1', "ytInitialData") is None

    def test_non_object_value_is_a_miss(self) -> None:
        assert extract_named_json('var ytInitialData = [1, 2];', "ytInitialData") is None

    def test_non_string_html(self) -> None:
        assert extract_named_json(None, "ytInitialData") is None  # type: ignore[arg-type]


class TestExtractNumberFromFreeText:
    """Tests for locale-grouped integer parsing."""

    @pytest.mark.parametrize(
        "text",
        [
            "12,453",
            "12.453",
            "12 453",
            "12\u00a0453",
            "12\u202f453",
            "12,453 watching now",
            "12.453 espectadores",
            "Ahora: 12 453 mirando ahora",
        ],
    )
    def test_grouped_numerals(self, text: str) -> None:
        assert extract_number_from_free_text(text) == 12453

    def test_ungrouped_number_is_read_whole(self) -> None:
        assert extract_number_from_free_text("12453 watching now") == 12453

    def test_multiple_groups(self) -> None:
        assert extract_number_from_free_text("1,234,567 views") == 1234567

    def test_small_number(self) -> None:
        assert extract_number_from_free_text("7 watching now") == 7

    def test_first_number_wins(self) -> None:
        assert extract_number_from_free_text("3 of 12,000") == 3

    @pytest.mark.parametrize("text", [None, "", "no digits here", 42, {"a": 1}])
    def test_misses_return_none(self, text: Any) -> None:
        assert extract_number_from_free_text(text) is None


class TestExtractWatchingNowFromHtml:
    """Tests for the raw-HTML viewer regex."""

    def test_watching_now_phrase(self) -> None:
        html = "<span>8,910 watching now</span>"
        assert extract_watching_now_from_html(html) == 8910

    def test_spanish_phrase(self) -> None:
        assert extract_watching_now_from_html("<b>1.500 espectadores</b>") == 1500

    def test_non_breaking_space_before_phrase(self) -> None:
        assert extract_watching_now_from_html("2\u00a0345\u00a0watching now") == 2345

    def test_no_phrase(self) -> None:
        assert extract_watching_now_from_html("<span>1,000 views</span>") is None

    def test_empty_html(self) -> None:
        assert extract_watching_now_from_html("") is None


class TestFindConcurrentViewers:
    """Tests for the depth-bounded JSON tree search."""

    def test_view_count_simple_text(self) -> None:
        assert find_concurrent_viewers({"viewCount": {"simpleText": "1,234 watching now"}}) == 1234

    def test_view_count_runs(self) -> None:
        tree = {"viewCount": {"runs": [{"text": "5.678"}, {"text": " espectadores"}]}}
        result = find_concurrent_viewers_result(tree)
        assert result.value == 5678
        assert result.strategy == "viewCount.runs"

    def test_phrase_in_runs_outside_view_count(self) -> None:
        tree = {"header": {"runs": [{"text": "321"}, {"text": "watching now"}]}}
        result = find_concurrent_viewers_result(tree)
        assert result.value == 321
        assert result.strategy == "phrase_runs"

    def test_phrase_in_plain_string(self) -> None:
        tree = {"a": [{"b": "999 viendo ahora"}]}
        result = find_concurrent_viewers_result(tree)
        assert result.value == 999
        assert result.strategy == "phrase_text"

    def test_phrase_in_list_of_strings(self) -> None:
        assert find_concurrent_viewers({"labels": ["live", "42 watching now"]}) == 42

    def test_first_candidate_in_depth_first_order(self) -> None:
        tree = {
            "first": {"viewCount": {"simpleText": "10 watching now"}},
            "second": {"viewCount": {"simpleText": "20 watching now"}},
        }
        assert find_concurrent_viewers(tree) == 10

    def test_nested_deep_in_watch_page_shape(self) -> None:
        tree = {
            "contents": {
                "twoColumnWatchNextResults": {
                    "results": {
                        "results": {
                            "contents": [
                                {"videoPrimaryInfoRenderer": {"title": {"runs": [{"text": "t"}]}}},
                                {
                                    "videoPrimaryInfoRenderer": {
                                        "viewCount": {
                                            "videoViewCountRenderer": {
                                                "viewCount": {
                                                    "runs": [{"text": "12,453"}, {"text": " watching now"}]
                                                }
                                            }
                                        }
                                    }
                                },
                            ]
                        }
                    }
                }
            }
        }
        assert find_concurrent_viewers(tree) == 12453

    def test_no_candidates(self) -> None:
        result = find_concurrent_viewers_result({"a": {"b": "nothing"}, "c": [1, 2]})
        assert result.value is None
        assert result.miss_reason == "no_candidates"

    def test_view_count_without_digits_is_skipped(self) -> None:
        tree = {"viewCount": {"simpleText": "No views"}, "x": "7 watching now"}
        assert find_concurrent_viewers(tree) == 7

    @pytest.mark.parametrize("root", [None, "1,234 watching now", 1234])
    def test_non_tree_root(self, root: Any) -> None:
        result = find_concurrent_viewers_result(root)
        assert result.value is None
        assert result.miss_reason == "not_a_tree"

    def test_depth_bound_skips_deep_subtrees(self) -> None:
        tree: dict[str, Any] = {"viewCount": {"simpleText": "55 watching now"}}
        for _ in range(100):
            tree = {"child": tree}

        assert find_concurrent_viewers(tree, max_depth=64) is None
        assert find_concurrent_viewers(tree, max_depth=200) == 55

    def test_shallow_value_found_within_bound(self) -> None:
        tree: dict[str, Any] = {"viewCount": {"simpleText": "55 watching now"}}
        for _ in range(10):
            tree = {"child": tree}
        assert find_concurrent_viewers(tree, max_depth=64) == 55


class TestLiveIndicators:
    """Tests for live-now signals and video ID literals."""

    def test_live_watch_page_has_all_indicators(
        self, watch_page_html: Callable[..., str]
    ) -> None:
        html = watch_page_html(VIDEO_ID, live=True)
        assert live_now_indicators(html) == [
            "player_response",
            "is_live_now_flag",
            "watching_now_text",
        ]
        assert is_live_now_indicated(html) is True

    def test_ended_stream_has_no_indicators(
        self, watch_page_html: Callable[..., str]
    ) -> None:
        html = watch_page_html(VIDEO_ID, live=False)
        assert live_now_indicators(html) == []
        assert is_live_now_indicated(html) is False

    def test_loose_flag_alone_counts(self) -> None:
        assert live_now_indicators('{"isLiveNow": true}') == ["is_live_now_flag"]

    def test_phrase_alone_counts(self) -> None:
        assert is_live_now_indicated("<span>3 mirando ahora</span>") is True

    def test_empty_page(self) -> None:
        assert live_now_indicators("") == []

    def test_player_response_with_unexpected_shape(self) -> None:
        html = 'var ytInitialPlayerResponse = {"microformat": "oops"};'
        assert live_now_indicators(html) == []

    def test_find_video_id(self, channel_page_html: Callable[..., str]) -> None:
        assert find_video_id_in_html(channel_page_html(VIDEO_ID)) == VIDEO_ID

    def test_find_video_id_missing(self, channel_page_html: Callable[..., str]) -> None:
        assert find_video_id_in_html(channel_page_html()) is None
        assert find_video_id_in_html("") is None
