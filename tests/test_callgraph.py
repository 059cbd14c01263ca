# tests/test_callgraph.py
"""
Tests for the CallGraph store: registration, call edges, lookups and
the invariants that keep both index directions in sync.
"""

import types

import pytest

from callgraph_info import (
    AmbiguousLocationError,
    CallGraph,
    IdCollisionError,
    Location,
    LocationError,
    MissingEndpointError,
    UnknownFunctionError,
    UnknownLocationError,
    stable_function_id,
)


class TestAddCall:

    def test_unknown_source_named(self, graph):
        graph.add_function("callee", "a.c:1:1")
        with pytest.raises(MissingEndpointError) as info:
            graph.add_call("caller", "callee", "a.c:2:2")
        assert info.value.side == "source"
        assert info.value.name == "caller"
        assert "caller" in str(info.value)

    def test_unknown_target_named(self, graph):
        graph.add_function("caller", "a.c:1:1")
        with pytest.raises(MissingEndpointError) as info:
            graph.add_call("caller", "callee", "a.c:2:2")
        assert info.value.side == "target"
        assert info.value.name == "callee"

    def test_source_checked_first(self, graph):
        with pytest.raises(MissingEndpointError) as info:
            graph.add_call("x", "y", None)
        assert info.value.side == "source"

    def test_failure_does_not_mutate(self, graph):
        graph.add_function("caller", "a.c:1:1")
        with pytest.raises(LookupError):
            graph.add_call("caller", "nobody", "a.c:2:2")
        assert graph.edge_count == 0
        assert list(graph.get_calls("caller")) == []
        assert graph.node_count == 1

    def test_succeeds_after_registration(self, graph):
        graph.add_function("caller", "a.c:1:1")
        graph.add_function("callee", "a.c:9:1")
        edge = graph.add_call("caller", "callee", "a.c:2:2")
        assert edge.caller == graph.function_id("caller")
        assert edge.callee == graph.function_id("callee")
        assert edge.location == Location("a.c", 2, 2)

    def test_parallel_edges_kept(self, graph):
        graph.add_function("f", "a.c:1:1")
        graph.add_function("g", "a.c:9:1")
        graph.add_call("f", "g", "a.c:2:3")
        graph.add_call("f", "g", "a.c:4:3")
        calls = list(graph.get_calls("f"))
        assert len(calls) == 2
        assert [c.location.line for c in calls] == [2, 4]
        assert calls[0].key != calls[1].key
        assert graph.edge_count == 2

    def test_intrinsic_call(self, graph):
        graph.add_function("f", "a.c:1:1")
        graph.add_function("memcpy", "memcpy")
        edge = graph.add_call("f", "memcpy", None)
        assert edge.label == "intrinsic"
        assert edge.is_intrinsic
        assert edge.location is None

    def test_non_location_label(self, graph):
        graph.add_function("f", "a.c:1:1")
        graph.add_function("g", "a.c:2:1")
        edge = graph.add_call("f", "g", "call")
        assert edge.label == "call"
        assert edge.location is None
        assert not edge.is_intrinsic

    def test_malformed_call_site_is_fatal(self, graph):
        graph.add_function("f", "a.c:1:1")
        graph.add_function("g", "a.c:2:1")
        with pytest.raises(LocationError):
            graph.add_call("f", "g", "a.c:x:1")
        assert graph.edge_count == 0

    def test_malformed_call_site_lenient(self, graph):
        graph.add_function("f", "a.c:1:1")
        graph.add_function("g", "a.c:2:1")
        edge = graph.add_call("f", "g", "a.c:x:1", strict=False)
        assert edge.location is None
        assert edge.label == "a.c:x:1"

    def test_self_recursion(self, graph):
        graph.add_function("fact", "m.c:1:5")
        graph.add_call("fact", "fact", "m.c:2:12")
        assert [e.callee_name for e in graph.get_calls("fact")] == ["fact"]
        assert [e.caller_name for e in graph.get_callers("fact")] == ["fact"]


class TestAddFunction:

    def test_without_location(self, graph):
        graph.add_function("puts", "puts")
        assert "puts" in graph
        assert graph.get_location("puts") is None

    def test_none_location(self, graph):
        graph.add_function("puts", None)
        assert graph.get_location("puts") is None

    def test_returns_stable_id(self, graph):
        assert graph.add_function("main", "m.c:1:1") == stable_function_id("main")

    def test_reregistration_last_write_wins(self, graph):
        first = graph.add_function("f", "a.c:1:1")
        second = graph.add_function("f", "b.c:2:2")
        assert first == second
        assert graph.node_count == 1
        assert graph.get_location("f") == Location("b.c", 2, 2)
        assert graph.get_names(Location("a.c", 1, 1)) == []
        assert graph.get_name(Location("b.c", 2, 2)) == "f"

    def test_reregistration_keeps_edges(self, graph):
        graph.add_function("f", "a.c:1:1")
        graph.add_function("g", "a.c:5:1")
        graph.add_call("f", "g", "a.c:2:2")
        graph.add_function("g", "b.c:1:1")
        assert len(list(graph.get_callers("g"))) == 1

    def test_malformed_location_is_fatal(self, graph):
        with pytest.raises(LocationError):
            graph.add_function("f", "a.c:1:oops")
        assert "f" not in graph

    def test_malformed_location_lenient(self, graph):
        graph.add_function("f", "a.c:1:oops", strict=False)
        assert graph.get_location("f") is None

    def test_id_collision_detected(self, graph, monkeypatch):
        monkeypatch.setattr(
            "callgraph_info.callgraph.stable_function_id", lambda name: 42
        )
        graph.add_function("a", None)
        with pytest.raises(IdCollisionError):
            graph.add_function("b", None)
        assert graph.function_name(42) == "a"


class TestFunctionIds:

    def test_independent_of_history(self):
        one = CallGraph()
        one.add_function("x", None)
        one.add_function("y", None)
        two = CallGraph()
        two.add_function("y", None)
        assert one.function_id("y") == two.function_id("y")

    def test_deterministic(self):
        assert stable_function_id("main") == stable_function_id("main")
        assert stable_function_id("main") != stable_function_id("main2")

    def test_fits_64_bits(self):
        assert 0 <= stable_function_id("anything") < 2 ** 64


class TestLookups:

    def test_get_location_unknown(self, graph):
        with pytest.raises(UnknownFunctionError):
            graph.get_location("nope")

    def test_get_name(self, graph):
        graph.add_function("f", "a.c:1:1")
        assert graph.get_name(Location("a.c", 1, 1)) == "f"

    def test_get_name_unknown(self, graph):
        with pytest.raises(UnknownLocationError):
            graph.get_name(Location("a.c", 1, 1))

    def test_get_name_ambiguous(self, graph):
        graph.add_function("f_a", "gen.h:3:1")
        graph.add_function("f_b", "gen.h:3:1")
        with pytest.raises(AmbiguousLocationError) as info:
            graph.get_name(Location("gen.h", 3, 1))
        assert info.value.names == ["f_a", "f_b"]
        assert graph.get_names(Location("gen.h", 3, 1)) == ["f_a", "f_b"]

    def test_calls_and_callers(self, graph):
        for name in ("main", "a", "b"):
            graph.add_function(name, None)
        graph.add_call("main", "a", "m.c:2:1")
        graph.add_call("main", "b", "m.c:3:1")
        graph.add_call("a", "b", "m.c:9:1")
        assert [e.callee_name for e in graph.get_calls("main")] == ["a", "b"]
        assert sorted(e.caller_name for e in graph.get_callers("b")) == ["a", "main"]
        assert list(graph.get_callers("main")) == []

    def test_query_by_id(self, graph):
        graph.add_function("main", None)
        graph.add_function("a", None)
        graph.add_call("main", "a", None)
        calls = list(graph.get_calls(graph.function_id("main")))
        assert len(calls) == 1

    def test_unknown_function_query(self, graph):
        with pytest.raises(UnknownFunctionError):
            graph.get_calls("nope")
        with pytest.raises(UnknownFunctionError):
            graph.get_callers(12345)

    def test_calls_is_single_pass_iterator(self, graph):
        graph.add_function("main", None)
        graph.add_function("a", None)
        graph.add_call("main", "a", None)
        calls = graph.get_calls("main")
        assert isinstance(calls, types.GeneratorType)
        assert len(list(calls)) == 1
        assert list(calls) == []

    def test_len_contains_and_iteration(self, graph):
        graph.add_function("main", None)
        graph.add_function("a", None)
        graph.add_call("main", "a", None)
        assert len(graph) == 2
        assert "main" in graph and "zzz" not in graph
        assert list(graph.functions()) == ["main", "a"]
        assert [e.callee_name for e in graph.edges()] == ["a"]

    def test_statistics(self, graph):
        graph.add_function("main", "m.c:1:1")
        graph.add_function("a", None)
        graph.add_call("main", "a", None)
        graph.add_call("main", "a", "m.c:2:2")
        stats = graph.statistics()
        assert stats == {
            "functions": 2,
            "functions_without_location": 1,
            "calls": 2,
            "intrinsic_calls": 1,
            "dropped_calls": 0,
        }
