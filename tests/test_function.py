import pytest

from accessgate.model.function import FunctionMap, load_function_map


def test_builtin_names_are_loaded():
    fm = load_function_map()
    assert set(fm) == {"keyMatch", "keyMatch2", "keyMatch3", "keyMatch4", "regexMatch", "ipMatch"}


def test_each_call_returns_a_fresh_map():
    first = load_function_map()
    first.add_function("extra", lambda *args: True)
    assert "extra" not in load_function_map()


def test_add_function_registers_and_replaces():
    fm = FunctionMap()

    def first(*args):
        return 1

    def second(*args):
        return 2

    fm.add_function("f", first)
    assert fm["f"] is first
    fm.add_function("f", second)
    assert fm["f"] is second


@pytest.mark.parametrize(
    "name, key1, key2, expected",
    [
        ("keyMatch", "/alice_data/resource1", "/alice_data/*", True),
        ("keyMatch", "/bob_data/resource1", "/alice_data/*", False),
        ("keyMatch", "/cathy_data", "/cathy_data", True),
        ("keyMatch2", "/alice_data/resource1", "/alice_data/:resource", True),
        ("keyMatch2", "/alice_data/a/b", "/alice_data/:resource", False),
        ("keyMatch3", "/alice_data/resource1", "/alice_data/{resource}", True),
        ("keyMatch4", "/parent/1/child/1", "/parent/{id}/child/{id}", True),
        ("keyMatch4", "/parent/1/child/2", "/parent/{id}/child/{id}", False),
        ("regexMatch", "GET", "(GET)|(POST)", True),
        ("regexMatch", "DELETE", "(GET)|(POST)", False),
        ("ipMatch", "192.168.2.123", "192.168.2.0/24", True),
        ("ipMatch", "192.168.3.1", "192.168.2.0/24", False),
        ("ipMatch", "192.168.2.1", "192.168.2.1", True),
    ],
)
def test_builtin_matchers(name, key1, key2, expected):
    assert load_function_map()[name](key1, key2) is expected


def test_wrong_argument_count_is_rejected():
    with pytest.raises(ValueError):
        load_function_map()["keyMatch"]("/a")


def test_non_string_argument_is_rejected():
    with pytest.raises(TypeError):
        load_function_map()["regexMatch"]("/a", 1)


def test_ip_match_rejects_invalid_addresses():
    fm = load_function_map()
    with pytest.raises(ValueError, match="ip1"):
        fm["ipMatch"]("not-an-ip", "192.168.2.0/24")
    with pytest.raises(ValueError, match="ip2"):
        fm["ipMatch"]("192.168.2.1", "bogus")