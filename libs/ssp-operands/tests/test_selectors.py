"""Tests for label selectors."""

import pytest

from ssp_operands import Operator, Selector, requirement


class TestRequirement:
    """Test cases for selector requirements."""

    @pytest.mark.parametrize(
        "operator,values,expected",
        [
            (Operator.EQUALS, ("base",), "template.kubevirt.io/type=base"),
            (Operator.NOT_EQUALS, ("base",), "template.kubevirt.io/type!=base"),
            (Operator.IN, ("base", "custom"), "template.kubevirt.io/type in (base,custom)"),
            (Operator.NOT_IN, ("base",), "template.kubevirt.io/type notin (base)"),
            (Operator.EXISTS, (), "template.kubevirt.io/type"),
            (Operator.DOES_NOT_EXIST, (), "!template.kubevirt.io/type"),
        ],
    )
    def test_render(self, operator, values, expected):
        assert str(requirement("template.kubevirt.io/type", operator, *values)) == expected

    @pytest.mark.parametrize(
        "operator,labels,expected",
        [
            (Operator.EQUALS, {"k": "a"}, True),
            (Operator.EQUALS, {}, False),
            (Operator.NOT_EQUALS, {"k": "a"}, False),
            (Operator.NOT_EQUALS, {"k": "b"}, True),
            (Operator.NOT_EQUALS, {}, True),
            (Operator.IN, {"k": "a"}, True),
            (Operator.NOT_IN, {}, True),
            (Operator.NOT_IN, {"k": "a"}, False),
        ],
    )
    def test_matches(self, operator, labels, expected):
        assert requirement("k", operator, "a").matches(labels) is expected

    def test_exists(self):
        assert requirement("k", Operator.EXISTS).matches({"k": ""})
        assert not requirement("k", Operator.DOES_NOT_EXIST).matches({"k": ""})

    @pytest.mark.parametrize(
        "key,operator,values",
        [
            ("bad key", Operator.EQUALS, ("a",)),
            ("-leading", Operator.EQUALS, ("a",)),
            ("k", Operator.EQUALS, ("a", "b")),
            ("k", Operator.IN, ()),
            ("k", Operator.EXISTS, ("a",)),
            ("k", Operator.EQUALS, ("not valid!",)),
        ],
    )
    def test_invalid(self, key, operator, values):
        with pytest.raises(ValueError):
            requirement(key, operator, *values)


class TestSelector:
    """Test cases for selectors."""

    def test_add_returns_new_selector(self):
        base = Selector()
        selector = base.add(requirement("a", Operator.EQUALS, "1"), requirement("b", Operator.NOT_EQUALS, "2"))

        assert str(base) == ""
        assert str(selector) == "a=1,b!=2"
        assert selector.matches({"a": "1"})
        assert not selector.matches({"a": "1", "b": "2"})

    def test_empty_selector_matches_everything(self):
        assert Selector().matches(None)
