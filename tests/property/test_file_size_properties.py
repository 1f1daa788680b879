"""Property tests for human-readable file sizes."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from eva_api.formatter.helpers import format_file_size

_UNITS = ["B", "KB", "MB", "GB", "TB"]


@settings(max_examples=100)
@given(size=st.integers(min_value=1, max_value=1023))
def test_small_sizes_are_bytes(size) -> None:
    assert format_file_size(size) == f"{size} B"


@settings(max_examples=20)
@given(exponent=st.integers(min_value=0, max_value=4), multiplier=st.sampled_from([1, 2, 512]))
def test_exact_powers(exponent, multiplier) -> None:
    assert format_file_size(multiplier * 1024**exponent) == f"{multiplier} {_UNITS[exponent]}"


@settings(max_examples=200)
@given(size=st.integers(min_value=1, max_value=1024**5))
def test_shape(size) -> None:
    number, unit = format_file_size(size).split(" ")
    assert unit in _UNITS
    assert not number.endswith("0") or "." not in number
    assert not number.endswith(".")
    if unit != "TB":
        assert float(number) <= 1024


@given(size=st.integers(max_value=0))
def test_non_positive_is_zero(size) -> None:
    assert format_file_size(size) == "0 B"
