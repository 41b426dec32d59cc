from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.protocol import ToolResult
from core.registry import ToolRegistry

DIVIDE_BY_ZERO_MESSAGE = "Error: Cannot divide by zero"

SYMBOLS = {
    "add": "+",
    "subtract": "−",
    "multiply": "×",
    "divide": "÷",
}

_EXPONENT = re.compile(r"e([+-])0*(\d)")


class AddArguments(BaseModel):
    model_config = ConfigDict(strict=True)

    a: float = Field(..., description="First number")
    b: float = Field(..., description="Second number")


class CalculateArguments(BaseModel):
    model_config = ConfigDict(strict=True)

    operation: Literal["add", "subtract", "multiply", "divide"] = Field(
        ..., description="Arithmetic operation to perform"
    )
    a: float = Field(..., description="Left operand")
    b: float = Field(..., description="Right operand")


def format_number(value: float) -> str:
    """Render a double the way a JavaScript runtime prints it.

    Integral values drop the trailing ``.0``; non-finite values become
    ``NaN``/``Infinity``; everything else uses the shortest round-trip form.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" in text and 1e-6 <= abs(value) < 1e-4:
        return format(Decimal(text), "f")
    return _EXPONENT.sub(r"e\1\2", text)


def add(args: AddArguments) -> ToolResult:
    total = args.a + args.b
    return ToolResult.text(f"{format_number(args.a)} + {format_number(args.b)} = {format_number(total)}")


def calculate(args: CalculateArguments) -> ToolResult:
    a, b = args.a, args.b
    if args.operation == "add":
        result = a + b
    elif args.operation == "subtract":
        result = a - b
    elif args.operation == "multiply":
        result = a * b
    else:
        if b == 0:
            return ToolResult.text(DIVIDE_BY_ZERO_MESSAGE)
        result = a / b
    symbol = SYMBOLS[args.operation]
    return ToolResult.text(f"{format_number(a)} {symbol} {format_number(b)} = {format_number(result)}")


def register_calculator_tools(registry: ToolRegistry) -> None:
    """Register ``add`` and ``calculate`` on the given registry."""
    registry.register_tool(
        "add",
        AddArguments,
        add,
        description="Add two numbers",
    )
    registry.register_tool(
        "calculate",
        CalculateArguments,
        calculate,
        description="Perform add, subtract, multiply or divide on two numbers",
    )
