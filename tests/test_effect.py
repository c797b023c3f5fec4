import pytest

from accessgate.effect import DefaultEffector, Effect, Effector

ALLOW_OVERRIDE = "some(where (p_eft == allow))"
DENY_OVERRIDE = "!some(where (p_eft == deny))"
ALLOW_AND_DENY = "some(where (p_eft == allow)) && !some(where (p_eft == deny))"
PRIORITY = "priority(p_eft) || deny"

A, I, D = Effect.ALLOW, Effect.INDETERMINATE, Effect.DENY


@pytest.fixture
def effector():
    return DefaultEffector()


def test_allow_override(effector):
    assert effector.merge_effects(ALLOW_OVERRIDE, [I, I, A], []) is True
    assert effector.merge_effects(ALLOW_OVERRIDE, [I, D], []) is False
    assert effector.merge_effects(ALLOW_OVERRIDE, [], []) is False


def test_deny_override(effector):
    assert effector.merge_effects(DENY_OVERRIDE, [I, A], []) is True
    assert effector.merge_effects(DENY_OVERRIDE, [A, D], []) is False
    assert effector.merge_effects(DENY_OVERRIDE, [], []) is True


def test_allow_and_deny(effector):
    assert effector.merge_effects(ALLOW_AND_DENY, [A, I], []) is True
    assert effector.merge_effects(ALLOW_AND_DENY, [A, D, A], []) is False
    assert effector.merge_effects(ALLOW_AND_DENY, [I, I], []) is False


def test_priority_first_decisive_effect_wins(effector):
    assert effector.merge_effects(PRIORITY, [I, A, D], []) is True
    assert effector.merge_effects(PRIORITY, [I, D, A], []) is False
    assert effector.merge_effects(PRIORITY, [I, I], []) is False


def test_unsupported_expression_raises(effector):
    with pytest.raises(ValueError, match="unsupported effect"):
        effector.merge_effects("some(where (p_eft == maybe))", [A], [])


def test_effector_is_abstract():
    with pytest.raises(TypeError):
        Effector()