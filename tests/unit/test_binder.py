"""
Tests for slot binding: gaps, literals, dependencies, arity and cycles.
"""

import logging
import operator

import pytest

from reactfn import (
    ABSENT,
    GAP,
    ArityError,
    CyclicDependencyError,
    Graph,
    GraphSettings,
    SlotKind,
    state,
    wrap,
)
from reactfn.binder import discover_parameters


def three(x, y, z):
    return f"{x}-{y}-{z}"


class TestDiscoverParameters:
    """Positional parameter discovery."""

    def test_plain_function(self):
        params = discover_parameters(three)
        assert params.arity == 3
        assert not params.variadic
        assert params.defaults == (ABSENT, ABSENT, ABSENT)

    def test_defaults(self):
        params = discover_parameters(lambda x, y=10: None)
        assert params.arity == 2
        assert params.default(0) is ABSENT
        assert params.default(1) == 10
        assert params.default(5) is ABSENT

    def test_keyword_only_parameters_are_not_slots(self):
        params = discover_parameters(lambda x, *, flag=False: None)
        assert params.arity == 1

    def test_variadic(self):
        params = discover_parameters(lambda first, *rest: None)
        assert params.arity == 1
        assert params.variadic

    def test_context_consumes_first_parameter(self):
        params = discover_parameters(lambda self, name: None, has_context=True)
        assert params.arity == 1

    def test_context_without_receiver_parameter(self):
        with pytest.raises(TypeError, match="context"):
            discover_parameters(lambda: None, has_context=True)

    def test_positional_only_builtin(self):
        assert discover_parameters(operator.add).arity == 2

    def test_explicit_arity_overrides(self):
        params = discover_parameters(lambda *xs: None, arity=2)
        assert params.arity == 2
        assert not params.variadic

    def test_uninspectable_builtin_is_variadic(self):
        params = discover_parameters(max)
        assert params.arity == 0
        assert params.variadic


class TestBindTo:
    """bind_to semantics."""

    def test_returns_same_node(self):
        node = wrap(three)
        assert node.bind_to(1, 2, 3) is node

    def test_literal_binding(self):
        greet = wrap(lambda name: f"Hello, {name}").bind_to("Jane")
        assert greet.slots[0].kind is SlotKind.LITERAL
        assert greet() == "Hello, Jane"
        assert greet() == "Hello, Jane"

    def test_gap_leaves_slot_unbound(self):
        node = wrap(three).bind_to("x", GAP, "z")
        kinds = [slot.kind for slot in node.slots]
        assert kinds == [SlotKind.LITERAL, SlotKind.UNBOUND, SlotKind.LITERAL]
        assert node("y") == three("x", "y", "z")

    def test_node_binding_registers_dependent(self):
        source = state(1)
        node = wrap(lambda x: x + 1).bind_to(source)
        assert node.slots[0].kind is SlotKind.BOUND
        assert node.slots[0].value is source
        assert node.dependencies == [source]
        assert source.dependents == [node]

    def test_bind_to_derived_node(self):
        base = wrap(lambda: 20)
        node = wrap(lambda x: x + 1).bind_to(base)
        assert base.dependents == [node]
        assert node() == 21

    def test_partial_rebind_keeps_other_positions(self):
        node = wrap(three).bind_to(1, 2, 3)
        node.bind_to(10)
        assert [slot.value for slot in node.slots] == [10, 2, 3]
        assert node() == "10-2-3"

    def test_rebind_with_gap_unbinds(self):
        node = wrap(three).bind_to(1, 2, 3)
        node.bind_to(GAP)
        assert node.slots[0].kind is SlotKind.UNBOUND
        assert node("a") == "a-2-3"

    def test_rebind_moves_dependent_registration(self):
        first = state(1)
        second = state(2)
        node = wrap(lambda x: x).bind_to(first)
        node.bind_to(second)

        assert first.dependents == []
        assert second.dependents == [node]
        assert node() == 2

        first(100)
        assert not node.is_stale
        assert node() == 2

    def test_dependency_used_twice_survives_partial_rebind(self):
        source = state(3)
        node = wrap(operator.mul).bind_to(source, source)
        assert node.dependencies == [source]

        node.bind_to(GAP)
        assert source.dependents == [node]

        node.bind_to(GAP, 5)
        assert source.dependents == []

    def test_rebind_marks_node_and_dependents_stale(self):
        source = state(1)
        node = wrap(lambda x: x * 10).bind_to(source)
        downstream = wrap(lambda x: x + 1).bind_to(node)
        assert downstream() == 11
        assert not node.is_stale and not downstream.is_stale

        node.bind_to(5)

        assert node.is_stale
        assert downstream.is_stale
        assert downstream() == 51

    def test_bind_has_no_effect_on_cache_until_read(self, counted):
        compute = counted(lambda x: x * 2)
        node = wrap(compute).bind_to(1)
        node.bind_to(2)
        node.bind_to(3)
        assert compute.count == 0
        assert node() == 6
        assert compute.count == 1

    def test_variadic_accepts_any_number_of_positions(self):
        a = state(1)
        b = state(2)
        total = wrap(lambda *xs: sum(xs)).bind_to(a, b, 3)
        assert len(total.slots) == 3
        assert total() == 6

        b(20)
        assert total() == 24

    def test_uninspectable_builtin(self):
        a = state(4)
        biggest = wrap(max).bind_to(a, 7, GAP)
        assert len(biggest.slots) == 2
        assert biggest() == 7

        a(9)
        assert biggest() == 9

    def test_unbind_all(self):
        node = wrap(three).bind_to(1, 2, 3)
        node.unbind()
        assert not node.is_bound
        assert node("a", "b", "c") == "a-b-c"

    def test_unbind_positions(self):
        source = state(1)
        node = wrap(three).bind_to(source, 2, 3)
        node.unbind(0, 2)
        assert [slot.kind for slot in node.slots] == [
            SlotKind.UNBOUND,
            SlotKind.LITERAL,
            SlotKind.UNBOUND,
        ]
        assert source.dependents == []

    def test_unbind_unknown_position(self):
        node = wrap(three)
        with pytest.raises(IndexError):
            node.unbind(3)


class TestArity:
    """Arity checks at bind time."""

    def test_too_many_arguments(self):
        node = wrap(lambda x: x)
        with pytest.raises(ArityError, match="takes 1 argument"):
            node.bind_to(1, 2)

    def test_rejected_bind_leaves_node_untouched(self):
        source = state(1)
        node = wrap(lambda x: x)
        with pytest.raises(ArityError):
            node.bind_to(source, 2)
        assert node.slots[0].kind is SlotKind.UNBOUND
        assert source.dependents == []

    def test_arity_error_is_type_error(self):
        with pytest.raises(TypeError):
            wrap(lambda: 1).bind_to(1)

    def test_trailing_gaps_are_ignored(self):
        node = wrap(lambda x: x * 2).bind_to(4, GAP, GAP)
        assert len(node.slots) == 1
        assert node() == 8

    def test_explicit_arity(self):
        pair = wrap(lambda *items: items, arity=2)
        assert pair.bind_to(1, 2)() == (1, 2)
        with pytest.raises(ArityError):
            pair.bind_to(1, 2, 3)

    def test_non_strict_drops_with_warning(self, caplog):
        graph = Graph(GraphSettings(strict_arity=False))
        node = wrap(lambda x: x, graph=graph)

        with caplog.at_level(logging.WARNING):
            node.bind_to(1, 2)

        assert "Dropping bind argument 2" in caplog.text
        assert len(node.slots) == 1
        assert node() == 1


class TestCycles:
    """Bind-time cycle detection."""

    def test_self_binding(self):
        node = wrap(lambda x: x)
        with pytest.raises(CyclicDependencyError, match="would create a cycle"):
            node.bind_to(node)
        assert node.slots[0].kind is SlotKind.UNBOUND

    def test_two_node_cycle(self):
        a = wrap(lambda x: x)
        b = wrap(lambda x: x).bind_to(a)
        with pytest.raises(CyclicDependencyError):
            a.bind_to(b)
        assert a.dependencies == []

    def test_longer_cycle(self):
        a = wrap(lambda x: x)
        b = wrap(lambda x: x).bind_to(a)
        c = wrap(lambda x: x).bind_to(b)
        with pytest.raises(CyclicDependencyError):
            a.bind_to(c)

    def test_diamond_is_allowed(self):
        a = state(1)
        b = wrap(lambda x: x + 1).bind_to(a)
        c = wrap(lambda x: x * 2).bind_to(a)
        d = wrap(operator.add).bind_to(b, c)
        assert d() == 4

    def test_detection_can_be_turned_off(self):
        graph = Graph(GraphSettings(detect_cycles=False))
        a = wrap(lambda x: x, graph=graph)
        b = wrap(lambda x: x, graph=graph).bind_to(a)
        a.bind_to(b)
        assert a.dependencies == [b]
        assert b.dependencies == [a]
