"""Built-in functions available to matcher expressions."""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Callable
from typing import Any

ExpressionFunction = Callable[..., Any]


class FunctionMap(dict):
    """Mapping of function names to callables usable in matchers."""

    def add_function(self, name: str, function: ExpressionFunction) -> None:
        """Register (or replace) a function under ``name``."""
        self[name] = function


def _string_args(name: str, args: tuple) -> tuple[str, str]:
    if len(args) != 2:
        raise ValueError(f"{name}: expected 2 arguments, but got {len(args)}")
    for arg in args:
        if not isinstance(arg, str):
            raise TypeError(f"{name}: argument must be a string")
    return args[0], args[1]


def _key_match(key1: str, key2: str) -> bool:
    star = key2.find("*")
    if star == -1:
        return key1 == key2
    if len(key1) > star:
        return key1[:star] == key2[:star]
    return key1 == key2[:star]


def _regex_match(key1: str, key2: str) -> bool:
    return re.search(key2, key1) is not None


_COLON_PARAM = re.compile(r"(.*):[^/]+(.*)")
_BRACE_PARAM = re.compile(r"(.*)\{[^/]+?\}(.*)")


def _key_match2(key1: str, key2: str) -> bool:
    key2 = key2.replace("/*", "/.*")
    while "/:" in key2:
        key2 = _COLON_PARAM.sub(r"\1[^/]+\2", key2)
    return _regex_match(key1, "^" + key2 + "$")


def _key_match3(key1: str, key2: str) -> bool:
    key2 = key2.replace("/*", "/.*")
    while "/{" in key2:
        key2 = _BRACE_PARAM.sub(r"\1[^/]+\2", key2)
    return _regex_match(key1, "^" + key2 + "$")


def _key_match4(key1: str, key2: str) -> bool:
    key2 = key2.replace("/*", "/.*")
    tokens = re.findall(r"\{[^}]*\}", key2)
    while "/{" in key2:
        key2 = _BRACE_PARAM.sub(r"\1([^/]+)\2", key2)
    match = re.fullmatch(key2, key1)
    if match is None:
        return False
    values = match.groups()
    if len(tokens) != len(values):
        raise ValueError("keyMatch4: number of tokens does not match number of values")
    seen: dict[str, str] = {}
    for token, value in zip(tokens, values):
        if seen.setdefault(token, value) != value:
            return False
    return True


def _ip_match(ip1: str, ip2: str) -> bool:
    try:
        address = ipaddress.ip_address(ip1)
    except ValueError:
        raise ValueError(
            "invalid argument: ip1 in IPMatch() function is not an IP address."
        ) from None
    try:
        if "/" in ip2:
            return address in ipaddress.ip_network(ip2, strict=False)
        return address == ipaddress.ip_address(ip2)
    except ValueError:
        raise ValueError(
            "invalid argument: ip2 in IPMatch() function is neither an IP address nor a CIDR."
        ) from None


def _wrap(name: str, matcher: Callable[[str, str], bool]) -> ExpressionFunction:
    def function(*args: Any) -> bool:
        return matcher(*_string_args(name, args))

    function.__name__ = name
    return function


def load_function_map() -> FunctionMap:
    """Return a fresh map holding the built-in matcher functions."""
    fm = FunctionMap()
    fm.add_function("keyMatch", _wrap("keyMatch", _key_match))
    fm.add_function("keyMatch2", _wrap("keyMatch2", _key_match2))
    fm.add_function("keyMatch3", _wrap("keyMatch3", _key_match3))
    fm.add_function("keyMatch4", _wrap("keyMatch4", _key_match4))
    fm.add_function("regexMatch", _wrap("regexMatch", _regex_match))
    fm.add_function("ipMatch", _wrap("ipMatch", _ip_match))
    return fm