import pytest
from hypothesis import given, strategies as st
from pydantic import ValidationError

from handlers.calculator import (
    DIVIDE_BY_ZERO_MESSAGE,
    AddArguments,
    CalculateArguments,
    add,
    calculate,
    format_number,
)

numbers = st.floats(allow_nan=False, allow_infinity=False)
SYMBOL_OPS = [("add", "+", lambda a, b: a + b), ("subtract", "−", lambda a, b: a - b), ("multiply", "×", lambda a, b: a * b)]


def _text(result):
    assert len(result.content) == 1
    assert result.content[0].type == "text"
    return result.content[0].text


@pytest.mark.parametrize("value, expected", [
    (5.0, "5"),
    (-3.0, "-3"),
    (-0.0, "0"),
    (2.5, "2.5"),
    (0.1 + 0.2, "0.30000000000000004"),
    (1e-5, "0.00001"),
    (1e-7, "1e-7"),
    (1e21, "1e+21"),
    (float("inf"), "Infinity"),
    (float("-inf"), "-Infinity"),
    (float("nan"), "NaN"),
])
def test_format_number_matches_js_rendering(value, expected):
    assert format_number(value) == expected


def test_add_example():
    assert _text(add(AddArguments(a=2, b=3))) == "2 + 3 = 5"


@given(numbers, numbers)
def test_add_text_property(a, b):
    out = _text(add(AddArguments(a=a, b=b)))
    assert out == f"{format_number(a)} + {format_number(b)} = {format_number(a + b)}"


@pytest.mark.parametrize("operation, symbol, fn", SYMBOL_OPS)
@given(a=numbers, b=numbers)
def test_calculate_symbols_and_results(operation, symbol, fn, a, b):
    out = _text(calculate(CalculateArguments(operation=operation, a=a, b=b)))
    assert out == f"{format_number(a)} {symbol} {format_number(b)} = {format_number(fn(a, b))}"


@given(numbers, numbers.filter(lambda b: b != 0))
def test_calculate_divide_nonzero(a, b):
    out = _text(calculate(CalculateArguments(operation="divide", a=a, b=b)))
    assert out == f"{format_number(a)} ÷ {format_number(b)} = {format_number(a / b)}"


@given(numbers, st.sampled_from([0.0, -0.0]))
def test_calculate_divide_by_zero_is_error_text(a, b):
    result = calculate(CalculateArguments(operation="divide", a=a, b=b))
    assert _text(result) == DIVIDE_BY_ZERO_MESSAGE
    assert result.to_payload() == {"content": [{"type": "text", "text": DIVIDE_BY_ZERO_MESSAGE}]}


def test_calculate_examples():
    assert _text(calculate(CalculateArguments(operation="subtract", a=10, b=4))) == "10 − 4 = 6"
    assert _text(calculate(CalculateArguments(operation="multiply", a=6, b=7))) == "6 × 7 = 42"
    assert _text(calculate(CalculateArguments(operation="divide", a=7, b=2))) == "7 ÷ 2 = 3.5"


def test_arguments_reject_strings_and_unknown_operations():
    with pytest.raises(ValidationError):
        AddArguments.model_validate({"a": "2", "b": 3})
    with pytest.raises(ValidationError):
        AddArguments.model_validate({"a": True, "b": 3})
    with pytest.raises(ValidationError):
        CalculateArguments.model_validate({"operation": "modulo", "a": 1, "b": 2})
    with pytest.raises(ValidationError):
        CalculateArguments.model_validate({"operation": "add", "a": 1})
