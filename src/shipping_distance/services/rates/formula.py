"""Restricted arithmetic expressions for the formula total cost type."""

from __future__ import annotations

import ast
import math
import operator
from decimal import ROUND_HALF_UP, Decimal, DivisionByZero, InvalidOperation
from typing import Callable, Mapping

from ...errors import FormulaError

_BINARY_OPERATORS: dict[type, Callable[[Decimal, Decimal], Decimal]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS: dict[type, Callable[[Decimal], Decimal]] = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}


def _round(value: Decimal, places: Decimal = Decimal("0")) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-int(places)), rounding=ROUND_HALF_UP)


_FUNCTIONS: dict[str, Callable[..., Decimal]] = {
    "min": lambda *args: min(args),
    "max": lambda *args: max(args),
    "abs": lambda value: abs(value),
    "round": _round,
    "ceil": lambda value: Decimal(math.ceil(value)),
    "floor": lambda value: Decimal(math.floor(value)),
}


def _evaluate(node: ast.AST, variables: Mapping[str, Decimal]) -> Decimal:
    match node:
        case ast.Expression(body=body):
            return _evaluate(body, variables)
        case ast.Constant(value=value) if isinstance(value, (int, float)) and not isinstance(value, bool):
            return Decimal(str(value))
        case ast.Name(id=name):
            if name not in variables:
                raise FormulaError(f"Unknown variable in formula: {name}")
            return variables[name]
        case ast.BinOp(left=left, op=op, right=right) if type(op) in _BINARY_OPERATORS:
            return _BINARY_OPERATORS[type(op)](_evaluate(left, variables), _evaluate(right, variables))
        case ast.UnaryOp(op=op, operand=operand) if type(op) in _UNARY_OPERATORS:
            return _UNARY_OPERATORS[type(op)](_evaluate(operand, variables))
        case ast.Call(func=ast.Name(id=name), args=args, keywords=[]) if name in _FUNCTIONS:
            if not args:
                raise FormulaError(f"Function {name} needs at least one argument")
            return _FUNCTIONS[name](*(_evaluate(arg, variables) for arg in args))
    raise FormulaError(f"Unsupported formula syntax: {ast.dump(node)[:60]}")


def evaluate_formula(expression: str, variables: Mapping[str, Decimal]) -> Decimal:
    """Evaluate ``expression`` with Decimal arithmetic over ``variables``."""
    if not expression or not expression.strip():
        raise FormulaError("Total cost formula is empty")
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as exc:
        raise FormulaError(f"Invalid total cost formula: {exc.msg}") from exc
    try:
        return _evaluate(tree, variables)
    except (ArithmeticError, InvalidOperation, DivisionByZero, TypeError) as exc:
        raise FormulaError(f"Total cost formula could not be evaluated: {exc}") from exc
