import pytest

from cstream_ingest.parsing import (
    FALLBACK_PROVIDER_NAME,
    ParseStrategy,
    parse_arrays,
    parse_source_text,
)
from cstream_ingest.parsing.strategies import (
    parse_line_list,
    parse_named_arrays,
    parse_single_array,
)


def test_single_named_array_with_sibnet_urls():
    arrays = parse_arrays("var eps = ['https://sibnet.ru/v/1','https://sibnet.ru/v/2']")

    assert len(arrays) == 1
    assert arrays[0].source_name == "eps"
    assert arrays[0].provider_name == "Sibnet"
    assert arrays[0].urls == ("https://sibnet.ru/v/1", "https://sibnet.ru/v/2")


def test_multiple_named_arrays_keep_their_own_provider():
    text = """
var eps1 = [
  'https://vidomly.com/embed-1.html',
  'https://vidomly.com/embed-2.html',
];
var eps3 = [
  "https://vudeo.net/embed-a.html"
]
"""
    outcome = parse_source_text(text)

    assert outcome.strategy is ParseStrategy.NAMED_ARRAYS
    assert [a.source_name for a in outcome.arrays] == ["eps1", "eps3"]
    assert [a.provider_name for a in outcome.arrays] == ["Vidomly", "Vudeo"]
    assert [len(a.urls) for a in outcome.arrays] == [2, 1]


def test_declarations_without_semicolons_split_on_next_keyword():
    text = "let a = ['https://sibnet.ru/1'] const b = [`https://vudeo.net/2`]"
    arrays = parse_arrays(text)

    assert [a.source_name for a in arrays] == ["a", "b"]
    assert arrays[1].urls == ("https://vudeo.net/2",)


def test_duplicates_collapse_in_first_seen_order():
    text = (
        "var eps = ['https://sibnet.ru/2', 'https://sibnet.ru/1', "
        "'https://sibnet.ru/2', 'https://sibnet.ru/3']"
    )
    arrays = parse_arrays(text)

    assert arrays[0].urls == (
        "https://sibnet.ru/2",
        "https://sibnet.ru/1",
        "https://sibnet.ru/3",
    )


def test_canonical_line_output_reparses_identically():
    arrays = parse_arrays(
        "var eps = ['https://sibnet.ru/1', 'https://sibnet.ru/2', 'https://sibnet.ru/1']"
    )
    canonical = "\n".join(arrays[0].urls)

    reparsed = parse_source_text(canonical)

    assert reparsed.strategy is ParseStrategy.LINE_LIST
    assert reparsed.arrays[0].urls == arrays[0].urls


def test_non_url_literals_are_recorded_as_skips():
    outcome = parse_source_text("var eps = ['https://sibnet.ru/1', 'oops', 'https://sibnet.ru/2']")

    assert outcome.arrays[0].urls == ("https://sibnet.ru/1", "https://sibnet.ru/2")
    assert len(outcome.skipped) == 1
    assert outcome.skipped[0].url == "oops"
    assert outcome.skipped[0].index == 1
    assert outcome.skipped[0].source_name == "eps"


def test_named_array_without_urls_is_dropped():
    text = "var names = ['a', 'b'];\nvar eps = ['https://vudeo.net/1'];"
    arrays = parse_arrays(text)

    assert [a.source_name for a in arrays] == ["eps"]


def test_provider_falls_back_to_identifier_then_default():
    text = (
        "var lecteur_mirror = ['https://x.io/1'];\n"
        "var eps2 = ['https://y.io/1'];"
    )
    arrays = parse_arrays(text)

    assert [a.provider_name for a in arrays] == ["Mirror", FALLBACK_PROVIDER_NAME]


def test_anonymous_single_array():
    text = """[
  "https://sendvid.com/embed/1",
  "https://sendvid.com/embed/2"
];"""
    outcome = parse_source_text(text)

    assert outcome.strategy is ParseStrategy.SINGLE_ARRAY
    assert outcome.arrays[0].source_name == "default"
    assert outcome.arrays[0].provider_name == "SendVid"
    assert len(outcome.arrays[0].urls) == 2


def test_bare_lines_without_array_syntax():
    text = "https://sibnet.ru/1\nhttps://sibnet.ru/2\n\nhttps://sibnet.ru/3\n"
    outcome = parse_source_text(text)

    assert outcome.strategy is ParseStrategy.LINE_LIST
    assert len(outcome.arrays) == 1
    assert outcome.arrays[0].source_name == "default"
    assert outcome.arrays[0].urls == (
        "https://sibnet.ru/1",
        "https://sibnet.ru/2",
        "https://sibnet.ru/3",
    )


def test_bare_lines_strip_quotes_brackets_and_commas():
    text = "'https://vudeo.net/1',\n\"https://vudeo.net/2\";\n[https://vudeo.net/3]"
    arrays = parse_arrays(text)

    assert arrays[0].urls == (
        "https://vudeo.net/1",
        "https://vudeo.net/2",
        "https://vudeo.net/3",
    )


def test_unterminated_declaration_falls_through_to_lines():
    text = "var eps = [\n'https://sibnet.ru/1',\n'https://sibnet.ru/2',\n"
    outcome = parse_source_text(text)

    assert outcome.strategy is ParseStrategy.LINE_LIST
    assert outcome.arrays[0].source_name == "default"
    assert outcome.arrays[0].urls == ("https://sibnet.ru/1", "https://sibnet.ru/2")
    assert [skip.url for skip in outcome.skipped] == ["var eps ="]


@pytest.mark.parametrize("text", ["", "   \n\t ", None, "hello world", "var eps = ['nope']"])
def test_input_without_urls_yields_nothing(text):
    outcome = parse_source_text(text)

    assert outcome.arrays == []
    assert outcome.strategy is None
    assert outcome.url_count == 0


def test_strategies_are_independent():
    text = "var eps = ['https://sibnet.ru/1']"

    assert parse_named_arrays(text).found_urls
    assert not parse_single_array(text).found_urls
    assert not parse_line_list(text).found_urls


def test_two_adjacent_lists_are_not_a_single_array():
    text = "['https://sibnet.ru/1'] ['https://vudeo.net/2']"

    assert not parse_single_array(text).found_urls
    assert parse_source_text(text).arrays == []


def test_single_array_allows_brackets_inside_literals():
    text = "['https://sibnet.ru/v/[1]', 'https://sibnet.ru/v/2']"
    result = parse_single_array(text)

    assert result.candidates[0].urls == (
        "https://sibnet.ru/v/[1]",
        "https://sibnet.ru/v/2",
    )
