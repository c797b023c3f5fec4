"""Parsing and evaluation of matcher expressions."""

from __future__ import annotations

import math
import operator
import re
from collections.abc import Callable, Mapping
from typing import Any, NamedTuple


class ExpressionError(Exception):
    """Raised when an expression cannot be parsed or evaluated."""


_Lookup = Callable[[str], Any]
_Node = Callable[[_Lookup], Any]

_TOKEN_PATTERN = re.compile(
    r"""
      (?P<space>\s+)
    | (?P<number>0[xX][0-9a-fA-F]+|\d+(?:\.\d+)?|\.\d+)
    | (?P<string>'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*")
    | (?P<param>\[[^\]]*\])
    | (?P<name>[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)
    | (?P<op>\*\*|\?\?|==|!=|>=|<=|=~|!~|&&|\|\||<<|>>|[-+*/%<>!~&|^?:(),])
    """,
    re.VERBOSE,
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


class _Token(NamedTuple):
    kind: str
    value: Any


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), text)


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_PATTERN.match(text, pos)
        if match is None:
            raise ExpressionError(f"Invalid token {text[pos]!r} at position {pos}")
        kind, value = match.lastgroup, match.group()
        pos = match.end()
        if kind == "space":
            continue
        if kind == "number":
            number = int(value, 16) if value[:2].lower() == "0x" else value
            tokens.append(_Token("value", float(number)))
        elif kind == "string":
            tokens.append(_Token("value", _unescape(value[1:-1])))
        elif kind == "param":
            tokens.append(_Token("param", value[1:-1]))
        elif kind == "name":
            if value in ("true", "false"):
                tokens.append(_Token("value", value == "true"))
            elif value == "in":
                tokens.append(_Token("op", "in"))
            else:
                tokens.append(_Token("name", value))
        else:
            tokens.append(_Token("op", value))
    tokens.append(_Token("end", None))
    return tokens


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return "<nil>"
    return str(value)


def _type_error(value: Any, kind: str, op: str, reason: str) -> ExpressionError:
    return ExpressionError(
        f"Value '{_to_text(value)}' cannot be used with the {kind} '{op}', {reason}"
    )


def _require_numbers(op: str, kind: str, *values: Any) -> None:
    for value in values:
        if not _is_number(value):
            raise _type_error(value, kind, op, "it is not a number")


def _require_bool(op: str, kind: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise _type_error(value, kind, op, "it is not a bool")
    return value


def _equals(a: Any, b: Any) -> bool:
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def _add(op: str, a: Any, b: Any) -> Any:
    if _is_number(a) and _is_number(b):
        return a + b
    if isinstance(a, str) or isinstance(b, str):
        return _to_text(a) + _to_text(b)
    _require_numbers(op, "modifier", a, b)
    return None


def _numeric(func: Callable[[Any, Any], Any]) -> Callable[[str, Any, Any], Any]:
    def apply(op: str, a: Any, b: Any) -> Any:
        _require_numbers(op, "modifier", a, b)
        return func(a, b)

    return apply


def _divide(a: Any, b: Any) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _modulo(a: Any, b: Any) -> float:
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


def _power(a: Any, b: Any) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def _bitwise(func: Callable[[int, int], int]) -> Callable[[str, Any, Any], Any]:
    def apply(op: str, a: Any, b: Any) -> float:
        _require_numbers(op, "modifier", a, b)
        try:
            return float(func(int(a), int(b)))
        except (ValueError, OverflowError) as exc:
            raise ExpressionError(f"Invalid operands for '{op}': {exc}") from exc

    return apply


def _ordering(func: Callable[[Any, Any], bool]) -> Callable[[str, Any, Any], bool]:
    def apply(op: str, a: Any, b: Any) -> bool:
        if (_is_number(a) and _is_number(b)) or (isinstance(a, str) and isinstance(b, str)):
            return func(a, b)
        bad = b if _is_number(a) or isinstance(a, str) else a
        raise _type_error(bad, "comparator", op, "it is not a number or a string")

    return apply


def _regex(negate: bool) -> Callable[[str, Any, Any], bool]:
    def apply(op: str, a: Any, b: Any) -> bool:
        for value in (a, b):
            if not isinstance(value, str):
                raise _type_error(value, "comparator", op, "it is not a string")
        try:
            found = re.search(b, a) is not None
        except re.error as exc:
            raise ExpressionError(f"Unable to compile regexp pattern '{b}': {exc}") from exc
        return found != negate

    return apply


def _contains(op: str, a: Any, b: Any) -> bool:
    if not isinstance(b, (list, tuple, set, frozenset)):
        raise _type_error(b, "comparator", op, "it is not an array")
    return any(_equals(a, item) for item in b)


_COMPARATORS = {
    "==": lambda op, a, b: _equals(a, b),
    "!=": lambda op, a, b: not _equals(a, b),
    "<": _ordering(operator.lt),
    ">": _ordering(operator.gt),
    "<=": _ordering(operator.le),
    ">=": _ordering(operator.ge),
    "=~": _regex(negate=False),
    "!~": _regex(negate=True),
    "in": _contains,
}
_BITWISE = {
    "|": _bitwise(operator.or_),
    "&": _bitwise(operator.and_),
    "^": _bitwise(operator.xor),
}
_SHIFT = {"<<": _bitwise(operator.lshift), ">>": _bitwise(operator.rshift)}
_ADDITIVE = {"+": _add, "-": _numeric(operator.sub)}
_MULTIPLICATIVE = {
    "*": _numeric(operator.mul),
    "/": _numeric(_divide),
    "%": _numeric(_modulo),
}
_EXPONENT = {"**": _numeric(_power)}


def _constant_node(value: Any) -> _Node:
    return lambda lookup: value


def _binary_node(func: Callable, op: str, left: _Node, right: _Node) -> _Node:
    return lambda lookup: func(op, left(lookup), right(lookup))


def _logical_node(op: str, left: _Node, right: _Node) -> _Node:
    stop = op == "||"

    def node(lookup: _Lookup) -> bool:
        if _require_bool(op, "logical operator", left(lookup)) is stop:
            return stop
        return _require_bool(op, "logical operator", right(lookup))

    return node


def _coalesce_node(left: _Node, right: _Node) -> _Node:
    def node(lookup: _Lookup) -> Any:
        value = left(lookup)
        return value if value is not None else right(lookup)

    return node


def _ternary_node(cond: _Node, then: _Node, otherwise: _Node | None) -> _Node:
    def node(lookup: _Lookup) -> Any:
        if _require_bool("?", "ternary operator", cond(lookup)):
            return then(lookup)
        return otherwise(lookup) if otherwise is not None else None

    return node


def _prefix_node(op: str, operand: _Node) -> _Node:
    def node(lookup: _Lookup) -> Any:
        value = operand(lookup)
        if op == "!":
            return not _require_bool(op, "prefix", value)
        _require_numbers(op, "prefix", value)
        if op == "-":
            return -value
        return float(~int(value))

    return node


def _access(value: Any, attr: str, path: str) -> Any:
    if isinstance(value, Mapping):
        try:
            return value[attr]
        except KeyError:
            raise ExpressionError(f"No field '{attr}' found in '{path}'") from None
    try:
        return getattr(value, attr)
    except AttributeError:
        raise ExpressionError(f"No field '{attr}' found in '{path}'") from None


def _variable_node(path: str) -> _Node:
    head, *attrs = path.split(".")

    def node(lookup: _Lookup) -> Any:
        value = lookup(head)
        for attr in attrs:
            value = _access(value, attr, path)
        return value

    return node


def _invoke(name: str, function: Callable, values: list[Any]) -> Any:
    try:
        return function(*values)
    except ExpressionError:
        raise
    except Exception as exc:
        raise ExpressionError(f"{name}: {exc}") from exc


def _function_node(name: str, function: Callable, args: list[_Node]) -> _Node:
    return lambda lookup: _invoke(name, function, [arg(lookup) for arg in args])


def _method_node(path: str, args: list[_Node]) -> _Node:
    base, _, method = path.rpartition(".")
    target = _variable_node(base)

    def node(lookup: _Lookup) -> Any:
        function = _access(target(lookup), method, path)
        if not callable(function):
            raise ExpressionError(f"'{path}' is not a method")
        return _invoke(path, function, [arg(lookup) for arg in args])

    return node


def _tuple_node(items: list[_Node]) -> _Node:
    return lambda lookup: tuple(item(lookup) for item in items)


def _describe(token: _Token) -> str:
    if token.kind == "end":
        return "end of expression"
    return repr(token.value)


class _Parser:
    def __init__(self, tokens: list[_Token], functions: Mapping[str, Callable]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._functions = functions

    def _peek(self) -> _Token:
        return self._tokens[self._pos]

    def _next(self) -> _Token:
        token = self._tokens[self._pos]
        if token.kind != "end":
            self._pos += 1
        return token

    def _at_op(self, *ops: str) -> bool:
        token = self._peek()
        return token.kind == "op" and token.value in ops

    def _expect_op(self, op: str) -> None:
        if not self._at_op(op):
            raise ExpressionError(f"Expected '{op}', found {_describe(self._peek())}")
        self._next()

    def parse(self) -> _Node:
        node = self._ternary()
        if self._peek().kind != "end":
            raise ExpressionError(f"Unexpected {_describe(self._peek())}")
        return node

    def _ternary(self) -> _Node:
        cond = self._coalesce()
        if not self._at_op("?"):
            return cond
        self._next()
        then = self._ternary()
        otherwise = None
        if self._at_op(":"):
            self._next()
            otherwise = self._ternary()
        return _ternary_node(cond, then, otherwise)

    def _coalesce(self) -> _Node:
        left = self._logical_or()
        while self._at_op("??"):
            self._next()
            left = _coalesce_node(left, self._logical_or())
        return left

    def _logical_or(self) -> _Node:
        left = self._logical_and()
        while self._at_op("||"):
            self._next()
            left = _logical_node("||", left, self._logical_and())
        return left

    def _logical_and(self) -> _Node:
        left = self._comparison()
        while self._at_op("&&"):
            self._next()
            left = _logical_node("&&", left, self._comparison())
        return left

    def _binary(self, operand: Callable[[], _Node], table: Mapping[str, Callable]) -> _Node:
        left = operand()
        while self._at_op(*table):
            op = self._next().value
            left = _binary_node(table[op], op, left, operand())
        return left

    def _comparison(self) -> _Node:
        return self._binary(self._bitwise, _COMPARATORS)

    def _bitwise(self) -> _Node:
        return self._binary(self._shift, _BITWISE)

    def _shift(self) -> _Node:
        return self._binary(self._additive, _SHIFT)

    def _additive(self) -> _Node:
        return self._binary(self._multiplicative, _ADDITIVE)

    def _multiplicative(self) -> _Node:
        return self._binary(self._exponent, _MULTIPLICATIVE)

    def _exponent(self) -> _Node:
        return self._binary(self._prefix, _EXPONENT)

    def _prefix(self) -> _Node:
        if self._at_op("!", "-", "~"):
            op = self._next().value
            return _prefix_node(op, self._prefix())
        return self._primary()

    def _primary(self) -> _Node:
        token = self._next()
        if token.kind == "value":
            return _constant_node(token.value)
        if token.kind == "param":
            name = token.value
            return lambda lookup: lookup(name)
        if token.kind == "name":
            if self._at_op("("):
                return self._call(token.value)
            return _variable_node(token.value)
        if token.kind == "op" and token.value == "(":
            items = [self._ternary()]
            is_list = False
            while self._at_op(","):
                self._next()
                is_list = True
                items.append(self._ternary())
            self._expect_op(")")
            return _tuple_node(items) if is_list else items[0]
        raise ExpressionError(f"Unexpected {_describe(token)}")

    def _call(self, name: str) -> _Node:
        self._expect_op("(")
        args: list[_Node] = []
        if not self._at_op(")"):
            args.append(self._ternary())
            while self._at_op(","):
                self._next()
                args.append(self._ternary())
        self._expect_op(")")
        if name in self._functions:
            return _function_node(name, self._functions[name], args)
        if "." in name:
            return _method_node(name, args)
        raise ExpressionError(f"Undefined function {name}")


class Expression:
    """A parsed expression that can be evaluated against many parameter sets.

    Numbers are floats; strings use single or double quotes; ``true`` and
    ``false`` are booleans. Names are looked up in the parameters given to
    :meth:`evaluate`, and ``name(...)`` calls one of ``functions``.
    """

    def __init__(self, text: str, functions: Mapping[str, Callable] | None = None) -> None:
        self.text = text
        self._functions = dict(functions or {})
        self._root = _Parser(_tokenize(text), self._functions).parse()

    def evaluate(self, parameters: Mapping[str, Any] | None = None) -> Any:
        """Evaluate with the given name -> value mapping and return the result."""
        params: Mapping[str, Any] = parameters if parameters is not None else {}

        def lookup(name: str) -> Any:
            try:
                return params[name]
            except KeyError:
                raise ExpressionError(f"No parameter '{name}' found.") from None

        return self._root(lookup)

    def __repr__(self) -> str:
        return f"Expression({self.text!r})"