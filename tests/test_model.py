from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from memdiff.command import Product, Read, Sum, Write
from memdiff.model import Err, ModelError, Ok, ReferenceModel

valid_index = st.integers(min_value=0, max_value=3)
invalid_index = st.integers(min_value=4, max_value=255)
byte = st.integers(min_value=0, max_value=255)


def load(cells):
    m = ReferenceModel()
    for i, v in enumerate(cells):
        m.execute(Write(i, v))
    return m


def checked_fold(cells, start, op):
    acc = start
    for v in cells:
        acc = op(acc, v)
        if acc > 255:
            return Err(ModelError.OVERFLOW)
    return Ok(acc)


def test_starts_zeroed():
    assert ReferenceModel().cells == (0, 0, 0, 0)


@given(valid_index, byte)
def test_write_then_read(i, v):
    m = ReferenceModel()
    assert m.execute(Write(i, v)) == Ok(v)
    assert m.execute(Read(i)) == Ok(v)


@given(invalid_index, byte)
def test_out_of_range_is_rejected(i, v):
    m = ReferenceModel()
    assert m.execute(Read(i)) == Err(ModelError.INVALID_READ)
    assert m.execute(Write(i, v)) == Err(ModelError.INVALID_WRITE)
    assert m.cells == (0, 0, 0, 0)


@given(st.lists(byte, min_size=4, max_size=4))
def test_sum_matches_checked_fold(cells):
    assert load(cells).execute(Sum()) == checked_fold(cells, 0, lambda a, b: a + b)


@given(st.lists(byte, min_size=4, max_size=4))
def test_product_matches_checked_fold(cells):
    assert load(cells).execute(Product()) == checked_fold(cells, 1, lambda a, b: a * b)


def test_sum_overflow_after_two_writes():
    m = ReferenceModel()
    m.execute(Write(0, 200))
    m.execute(Write(1, 100))
    assert m.execute(Sum()) == Err(ModelError.OVERFLOW)


def test_product_of_zeroed_memory():
    assert ReferenceModel().execute(Product()) == Ok(0)


def test_overflow_reported_at_first_step():
    # 16 * 16 overflows before the trailing zero could bring it back
    assert load([16, 16, 0, 0]).execute(Product()) == Err(ModelError.OVERFLOW)
    assert load([255, 1, 0, 0]).execute(Sum()) == Err(ModelError.OVERFLOW)


def test_sum_at_limit():
    assert load([100, 100, 55, 0]).execute(Sum()) == Ok(255)


def test_rejects_non_command():
    with pytest.raises(TypeError):
        ReferenceModel().execute("sum")
