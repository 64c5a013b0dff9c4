"""Query pipeline tests: filter -> sort -> paginate over in-memory characters."""

import pytest

from app.query import (
    QueryState,
    clamp_page,
    filter_characters,
    paginate,
    run_query,
    sort_characters,
    total_pages_for,
)
from app.schemas import Character
from conftest import make_character


def _names(rows):
    return [c.name for c in rows]


def _many(n=23):
    statuses = ["Alive", "Dead", "unknown"]
    genders = ["Male", "Female", "Genderless", "unknown"]
    return [
        make_character(
            i,
            f"Name{i:03d}",
            status=statuses[i % 3],
            gender=genders[i % 4],
            species="Human" if i % 2 else "Alien",
        )
        for i in range(1, n + 1)
    ]


def test_alive_filter_sorted_by_name(three_characters):
    """Alive only, name asc, 10/page -> Morty, Rick on a single page."""
    state = QueryState(status={"Alive"}, sort="name", order="asc", page_size=10)
    res = run_query(three_characters, state)
    assert _names(res.results) == ["Morty", "Rick"]
    assert res.total_pages == 1
    assert res.total_count == 2


def test_second_page_holds_the_remainder(three_characters):
    """No filters, 2/page, page 2 -> the third character after sorting."""
    # the browser only offers 10/20/50; the pipeline itself takes any size
    state = QueryState.model_construct(page_size=2, page=2)
    res = run_query(three_characters, state)
    assert res.total_pages == 2
    assert _names(res.results) == ["Summer"]


def test_search_without_match_is_empty(three_characters):
    res = run_query(three_characters, QueryState(search="zzz"))
    assert res.results == []
    assert res.total_pages == 0
    assert res.total_count == 0


def test_empty_dataset_is_a_valid_empty_result():
    res = run_query([], QueryState())
    assert res == ([], 0, 0)


def test_search_is_case_insensitive_substring(three_characters):
    res = run_query(three_characters, QueryState(search="RT"))
    assert _names(res.results) == ["Morty"]
    res = run_query(three_characters, QueryState(search="m"))
    assert _names(res.results) == ["Morty", "Summer"]


def test_gender_and_species_filters():
    rows = [
        make_character(1, "A", gender="Male", species="Human"),
        make_character(2, "B", gender="Female", species="Alien"),
        make_character(3, "C", gender="Female", species="Human"),
        make_character(4, "D", gender="Genderless", species="Robot"),
    ]
    assert _names(filter_characters(rows, QueryState(gender={"Female"}))) == ["B", "C"]
    assert _names(filter_characters(rows, QueryState(species={"Human", "Robot"}))) == [
        "A",
        "C",
        "D",
    ]
    both = QueryState(gender={"Female"}, species={"Human"})
    assert _names(filter_characters(rows, both)) == ["C"]


def test_filters_combine_with_search():
    rows = _many()
    state = QueryState(search="name01", status={"Dead"}, species={"Human"})
    out = filter_characters(rows, state)
    assert out
    for c in out:
        assert "name01" in c.name.lower()
        assert c.status == "Dead"
        assert c.species == "Human"


@pytest.mark.parametrize(
    "state",
    [
        QueryState(search="name0"),
        QueryState(status={"Alive", "unknown"}),
        QueryState(gender={"Female"}, species={"Alien"}),
    ],
)
def test_filtering_is_idempotent(state):
    rows = _many()
    once = filter_characters(rows, state)
    twice = filter_characters(once, state)
    assert once == twice


@pytest.mark.parametrize("page_size", [10, 20, 50])
def test_slice_bounds_and_page_count(page_size):
    rows = _many(57)
    total = total_pages_for(len(rows), page_size)
    seen = []
    for page in range(1, total + 1):
        res = run_query(rows, QueryState(page=page, page_size=page_size))
        assert len(res.results) <= page_size
        if page < total:
            assert len(res.results) == page_size
        assert res.total_pages == total
        seen.extend(res.results)
    # every character appears exactly once across the pages
    assert sorted(c.id for c in seen) == list(range(1, 58))


def test_total_pages_zero_only_when_empty():
    assert total_pages_for(0, 10) == 0
    assert total_pages_for(1, 10) == 1
    assert total_pages_for(10, 10) == 1
    assert total_pages_for(11, 10) == 2
    assert total_pages_for(250, 20) == 13


def test_page_past_the_end_is_not_clamped(three_characters):
    res = run_query(three_characters, QueryState(page=5, page_size=10))
    assert res.results == []
    assert res.total_pages == 1


def test_clamp_page():
    assert clamp_page(5, 1) == 1
    assert clamp_page(0, 3) == 1
    assert clamp_page(2, 3) == 2
    assert clamp_page(4, 0) == 1


def test_order_toggle_reverses_distinct_keys():
    rows = _many(12)
    asc = sort_characters(rows, "name", "asc")
    desc = sort_characters(rows, "name", "desc")
    assert desc == list(reversed(asc))


def test_sort_is_stable_in_both_directions():
    rows = [
        make_character(1, "Zed", status="Alive"),
        make_character(2, "Amy", status="Dead"),
        make_character(3, "Bob", status="Alive"),
        make_character(4, "Cat", status="Dead"),
    ]
    asc = sort_characters(rows, "status", "asc")
    assert [c.id for c in asc] == [1, 3, 2, 4]
    desc = sort_characters(rows, "status", "desc")
    assert [c.id for c in desc] == [2, 4, 1, 3]


def test_sort_compares_lower_cased_values():
    rows = [
        make_character(1, "beta"),
        make_character(2, "Alpha"),
        make_character(3, "Gamma"),
    ]
    assert _names(sort_characters(rows, "name", "asc")) == ["Alpha", "beta", "Gamma"]


def test_missing_sort_value_sorts_as_empty_string():
    rows = [
        make_character(1, "A", gender="Male"),
        Character(id=2, name="B"),
        make_character(3, "C", gender="Female"),
    ]
    asc = sort_characters(rows, "gender", "asc")
    assert [c.id for c in asc] == [2, 3, 1]
    desc = sort_characters(rows, "gender", "desc")
    assert [c.id for c in desc] == [1, 3, 2]


def test_record_missing_filter_field_is_excluded_only_when_filtering():
    rows = [Character(id=1, name="Nobody"), make_character(2, "Somebody")]
    assert len(filter_characters(rows, QueryState())) == 2
    assert _names(filter_characters(rows, QueryState(status={"Alive"}))) == ["Somebody"]


def test_paginate_clips_to_available_rows():
    rows = _many(5)
    assert [c.id for c in paginate(rows, 1, 10)] == [1, 2, 3, 4, 5]
    assert paginate(rows, 2, 10) == []


def test_query_state_is_hashable_and_serializable():
    a = QueryState(status={"Alive"}, species={"Human"})
    b = QueryState(status=frozenset({"Alive"}), species=["Human"])
    assert a == b
    assert hash(a) == hash(b)
    dumped = a.model_dump(mode="json")
    assert dumped["status"] == ["Alive"]
    assert QueryState.model_validate(dumped) == a


@pytest.mark.parametrize("bad", [{"page": 0}, {"page_size": 15}, {"sort": "species"}])
def test_query_state_rejects_invalid_values(bad):
    with pytest.raises(ValueError):
        QueryState(**bad)


def test_sort_collates_accented_names_with_their_base_letter():
    rows = [
        make_character(1, "Zeep"),
        make_character(2, "Álvaro"),
        make_character(3, "Beth"),
    ]
    assert _names(sort_characters(rows, "name", "asc")) == ["Álvaro", "Beth", "Zeep"]
    assert _names(sort_characters(rows, "name", "desc")) == ["Zeep", "Beth", "Álvaro"]


def test_name_with_nul_character_still_sorts():
    rows = [make_character(1, "Ri\x00ck"), make_character(2, "Morty")]
    res = run_query(rows, QueryState())
    assert _names(res.results) == ["Morty", "Ri\x00ck"]
    assert res.total_pages == 1

    only_nul = [make_character(3, "\x00"), make_character(4, "Beth")]
    assert [c.id for c in sort_characters(only_nul, "name", "asc")] == [3, 4]
