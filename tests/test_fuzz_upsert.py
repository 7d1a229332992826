from __future__ import annotations

from hypothesis import HealthCheck, assume, given, settings
from hypothesis import strategies as st

from flakepatch import InsertionLocation, add_input, find_first, list_inputs, parse_source
from flakepatch import ast as A
from flakepatch.attrpath import literal_text
from flakepatch.positions import span_to_offsets
from flakepatch.testing import generate_flake_sources


def _flake() -> st.SearchStrategy[str]:
    return st.integers(min_value=0, max_value=2**32 - 1).map(
        lambda seed: generate_flake_sources(seed=seed, count=1)[0]
    )


def _new_name() -> st.SearchStrategy[str]:
    # Generated flakes only use lowercase names, so these never collide.
    return st.from_regex(r"New[A-Za-z0-9_\-]{0,10}", fullmatch=True)


@given(src=_flake(), name=_new_name(), location=st.sampled_from(list(InsertionLocation)))
@settings(max_examples=300, suppress_health_check=[HealthCheck.too_slow])
def test_insert_is_parseable_complete_and_idempotent(src: str, name: str, location: InsertionLocation) -> None:
    url = f"github:example/{name}"
    out = add_input(src, name, url, insertion_location=location)

    tree = parse_source(out)
    found = find_first(tree, ["inputs", name, "url"])
    assert found is not None
    assert literal_text(found.value) == url

    before = {e.name: e.url for e in list_inputs(parse_source(src))}
    after = {e.name: e.url for e in list_inputs(tree)}
    assert after == {**before, name: url}

    head = find_first(tree, ["outputs"]).value.head
    if isinstance(head, A.FunctionHeadDestructured):
        assert [a.identifier for a in head.arguments].count(name) == 1

    assert add_input(out, name, url, insertion_location=location) == out


@given(src=_flake(), data=st.data())
@settings(max_examples=300, suppress_health_check=[HealthCheck.too_slow])
def test_update_only_touches_the_value(src: str, data: st.DataObject) -> None:
    entries = list_inputs(parse_source(src))
    assume(entries)
    entry = data.draw(st.sampled_from(entries))

    value = find_first(parse_source(src), ["inputs", entry.name, "url"]).value
    start, end = span_to_offsets(src, value.span)
    url = "https://example.org/replacement.tar.gz"

    out = add_input(src, entry.name, url)
    delta = len(out) - len(src)
    assert out[:start] == src[:start]
    assert out[end + delta :] == src[end:]
    assert out[start : end + delta] == f'"{url}"'
