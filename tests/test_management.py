import pytest

from accessgate.management import Enforcer

RBAC_MODEL = """
[request_definition]
r = sub, obj, act

[policy_definition]
p = sub, obj, act

[role_definition]
g = _, _

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = g(r.sub, p.sub) && r.obj == p.obj && r.act == p.act
"""

RBAC_POLICY = """p, alice, data1, read
p, bob, data2, write
p, data2_admin, data2, read
p, data2_admin, data2, write
g, alice, data2_admin
"""


@pytest.fixture
def enforcer(tmp_path):
    model_path = tmp_path / "rbac_model.conf"
    policy_path = tmp_path / "rbac_policy.csv"
    model_path.write_text(RBAC_MODEL)
    policy_path.write_text(RBAC_POLICY)
    return Enforcer(str(model_path), str(policy_path))


def roles(e, user):
    return [rule[1] for rule in e.get_filtered_grouping_policy(0, user)]


def users(e, role):
    return [rule[0] for rule in e.get_filtered_grouping_policy(1, role)]


def test_get_list(enforcer):
    assert enforcer.get_all_subjects() == ["alice", "bob", "data2_admin"]
    assert enforcer.get_all_objects() == ["data1", "data2"]
    assert enforcer.get_all_actions() == ["read", "write"]
    assert enforcer.get_all_roles() == ["data2_admin"]


def test_get_named_lists(enforcer):
    assert enforcer.get_all_named_subjects("p") == ["alice", "bob", "data2_admin"]
    assert enforcer.get_all_named_objects("p") == ["data1", "data2"]
    assert enforcer.get_all_named_actions("p") == ["read", "write"]
    assert enforcer.get_all_named_roles("g") == ["data2_admin"]


def test_get_policy(enforcer):
    assert enforcer.get_policy() == [
        ["alice", "data1", "read"],
        ["bob", "data2", "write"],
        ["data2_admin", "data2", "read"],
        ["data2_admin", "data2", "write"],
    ]


@pytest.mark.parametrize(
    "field_index, values, expected",
    [
        (0, ("alice",), [["alice", "data1", "read"]]),
        (0, ("bob",), [["bob", "data2", "write"]]),
        (0, ("data2_admin",), [["data2_admin", "data2", "read"], ["data2_admin", "data2", "write"]]),
        (1, ("data1",), [["alice", "data1", "read"]]),
        (
            1,
            ("data2",),
            [["bob", "data2", "write"], ["data2_admin", "data2", "read"], ["data2_admin", "data2", "write"]],
        ),
        (2, ("read",), [["alice", "data1", "read"], ["data2_admin", "data2", "read"]]),
        (2, ("write",), [["bob", "data2", "write"], ["data2_admin", "data2", "write"]]),
        (
            0,
            ("data2_admin", "data2"),
            [["data2_admin", "data2", "read"], ["data2_admin", "data2", "write"]],
        ),
        (0, ("data2_admin", "", "read"), [["data2_admin", "data2", "read"]]),
        (1, ("data2", "write"), [["bob", "data2", "write"], ["data2_admin", "data2", "write"]]),
    ],
)
def test_get_filtered_policy(enforcer, field_index, values, expected):
    assert enforcer.get_filtered_policy(field_index, *values) == expected


@pytest.mark.parametrize(
    "rule, expected",
    [
        (["alice", "data1", "read"], True),
        (["bob", "data2", "write"], True),
        (["alice", "data2", "read"], False),
        (["bob", "data3", "write"], False),
    ],
)
def test_has_policy(enforcer, rule, expected):
    assert enforcer.has_policy(rule) is expected
    assert enforcer.has_policy(*rule) is expected


def test_get_grouping_policy(enforcer):
    assert enforcer.get_grouping_policy() == [["alice", "data2_admin"]]
    assert enforcer.get_named_grouping_policy("g") == [["alice", "data2_admin"]]


@pytest.mark.parametrize(
    "field_index, values, expected",
    [
        (0, ("alice",), [["alice", "data2_admin"]]),
        (0, ("bob",), []),
        (1, ("data1_admin",), []),
        (1, ("data2_admin",), [["alice", "data2_admin"]]),
        (0, ("", "data2_admin"), [["alice", "data2_admin"]]),
    ],
)
def test_get_filtered_grouping_policy(enforcer, field_index, values, expected):
    assert enforcer.get_filtered_grouping_policy(field_index, *values) == expected


def test_has_grouping_policy(enforcer):
    assert enforcer.has_grouping_policy(["alice", "data2_admin"]) is True
    assert enforcer.has_grouping_policy(["bob", "data2_admin"]) is False


def test_modify_policy(enforcer):
    assert enforcer.remove_policy("alice", "data1", "read") is True
    assert enforcer.remove_policy("bob", "data2", "write") is True
    assert enforcer.remove_policy("alice", "data1", "read") is False
    assert enforcer.add_policy("eve", "data3", "read") is True
    assert enforcer.add_policy("eve", "data3", "read") is False

    named = ["eve", "data3", "read"]
    assert enforcer.remove_named_policy("p", named) is True
    assert enforcer.add_named_policy("p", named) is True

    assert enforcer.get_policy() == [
        ["data2_admin", "data2", "read"],
        ["data2_admin", "data2", "write"],
        ["eve", "data3", "read"],
    ]

    assert enforcer.remove_filtered_policy(1, "data2") is True
    assert enforcer.get_policy() == [["eve", "data3", "read"]]
    assert enforcer.remove_filtered_policy(1, "data2") is False


def test_modify_grouping_policy(enforcer):
    assert roles(enforcer, "alice") == ["data2_admin"]
    assert roles(enforcer, "bob") == []
    assert roles(enforcer, "eve") == []
    assert roles(enforcer, "non_exist") == []

    enforcer.remove_grouping_policy("alice", "data2_admin")
    enforcer.add_grouping_policy("bob", "data1_admin")
    enforcer.add_grouping_policy("eve", "data3_admin")

    named = ["alice", "data2_admin"]
    assert roles(enforcer, "alice") == []
    enforcer.add_named_grouping_policy("g", named)
    assert roles(enforcer, "alice") == ["data2_admin"]
    enforcer.remove_named_grouping_policy("g", named)

    assert roles(enforcer, "alice") == []
    assert roles(enforcer, "bob") == ["data1_admin"]
    assert roles(enforcer, "eve") == ["data3_admin"]
    assert roles(enforcer, "non_exist") == []

    assert users(enforcer, "data1_admin") == ["bob"]
    assert users(enforcer, "data2_admin") == []
    assert users(enforcer, "data3_admin") == ["eve"]

    enforcer.remove_filtered_grouping_policy(0, "bob")

    assert roles(enforcer, "alice") == []
    assert roles(enforcer, "bob") == []
    assert roles(enforcer, "eve") == ["data3_admin"]
    assert users(enforcer, "data1_admin") == []
    assert users(enforcer, "data2_admin") == []
    assert users(enforcer, "data3_admin") == ["eve"]


def test_grouping_changes_rebuild_role_links(enforcer):
    assert enforcer.enforce("alice", "data2", "read") is True
    enforcer.remove_grouping_policy("alice", "data2_admin")
    assert enforcer.enforce("alice", "data2", "read") is False
    enforcer.add_grouping_policy("bob", "data2_admin")
    assert enforcer.enforce("bob", "data2", "read") is True


def test_non_string_field_rejected(enforcer):
    with pytest.raises(TypeError):
        enforcer.add_policy("alice", 1, "read")