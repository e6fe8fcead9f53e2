"""
Tests for container graph discovery and duplication ordering.

Covers:
    - Sharing (diamond): each container discovered once
    - Cycles (mutual, self, deep) fail with the cycle path
    - Children-first ordering property
"""

import pytest

from locrep.errors import GraphError, GraphErrorReason
from locrep.graph import discover, find_cycle, order
from locrep.memory import InMemoryDocument


def build_diamond():
    """Main -> A, B; A -> C; B -> C."""
    doc = InMemoryDocument()
    main = doc.add_container("Main")
    a = doc.add_container("A")
    b = doc.add_container("B")
    c = doc.add_container("C")
    doc.add_text(c, "Headline", "Hello")
    doc.add_reference(main, a)
    doc.add_reference(main, b)
    doc.add_reference(a, c)
    doc.add_reference(b, c)
    return doc, main, a, b, c


def assert_children_first(doc, ordered):
    position = {c.id: i for i, c in enumerate(ordered)}
    for container in ordered:
        for child in container.child_containers():
            if child.id in position:
                assert position[child.id] < position[container.id], (
                    f"{child.name} must come before {container.name}"
                )


class TestDiscover:
    """Reachability below a root."""

    def test_root_excluded(self):
        doc, main, a, b, c = build_diamond()
        found = discover(doc, main)
        assert main not in found

    def test_shared_container_once(self):
        """C is reachable through A and B but collected once."""
        doc, main, a, b, c = build_diamond()
        found = discover(doc, main)
        assert [x.name for x in found] == ["A", "C", "B"]

    def test_no_children(self):
        doc = InMemoryDocument()
        main = doc.add_container("Main")
        doc.add_text(main, "Headline")
        assert discover(doc, main) == []

    def test_same_names_kept_apart(self):
        """Identity is by id: two containers called 'Sub' are both found."""
        doc = InMemoryDocument()
        main = doc.add_container("Main")
        first = doc.add_container("Sub")
        second = doc.add_container("Sub")
        doc.add_reference(main, first)
        doc.add_reference(main, second)
        assert discover(doc, main) == [first, second]

    def test_deep_chain(self):
        doc = InMemoryDocument()
        main = doc.add_container("Main")
        parent = main
        chain = []
        for i in range(50):
            child = doc.add_container(f"Level{i}")
            doc.add_reference(parent, child)
            chain.append(child)
            parent = child
        assert discover(doc, main) == chain


class TestCycles:
    """Cyclic references fail fast instead of looping."""

    def test_mutual_cycle(self):
        doc = InMemoryDocument()
        main = doc.add_container("Main")
        a = doc.add_container("A")
        b = doc.add_container("B")
        doc.add_reference(main, a)
        doc.add_reference(a, b)
        doc.add_reference(b, a)

        with pytest.raises(GraphError) as exc:
            discover(doc, main)
        assert exc.value.reason is GraphErrorReason.CYCLIC_REFERENCE
        assert exc.value.cycle == ["A", "B", "A"]
        assert "A -> B -> A" in str(exc.value)

    def test_self_reference(self):
        doc = InMemoryDocument()
        main = doc.add_container("Main")
        doc.add_reference(main, main)

        with pytest.raises(GraphError) as exc:
            discover(doc, main)
        assert exc.value.cycle == ["Main", "Main"]

    def test_cycle_back_to_root(self):
        doc = InMemoryDocument()
        main = doc.add_container("Main")
        sub = doc.add_container("Sub")
        doc.add_reference(main, sub)
        doc.add_reference(sub, main)

        with pytest.raises(GraphError) as exc:
            discover(doc, main)
        assert exc.value.cycle == ["Main", "Sub", "Main"]

    def test_diamond_is_not_a_cycle(self):
        doc, main, a, b, c = build_diamond()
        assert find_cycle(doc, [a, b, c]) is None

    def test_find_cycle(self):
        doc = InMemoryDocument()
        a = doc.add_container("A")
        b = doc.add_container("B")
        doc.add_reference(a, b)
        doc.add_reference(b, a)
        assert find_cycle(doc, [a, b]) == ["A", "B", "A"]


class TestOrder:
    """Children-first ordering."""

    def test_diamond(self):
        doc, main, a, b, c = build_diamond()
        ordered = order(doc, discover(doc, main))
        assert ordered[0] is c
        assert set(x.id for x in ordered) == {a.id, b.id, c.id}
        assert_children_first(doc, ordered)

    def test_reverse_input(self):
        """Input order does not matter."""
        doc, main, a, b, c = build_diamond()
        ordered = order(doc, [a, b, c][::-1])
        assert_children_first(doc, ordered)

    def test_outside_children_ignored(self):
        """Edges to containers outside the input do not block ordering."""
        doc, main, a, b, c = build_diamond()
        assert order(doc, [a]) == [a]

    def test_deep_chain_reversed(self):
        doc = InMemoryDocument()
        main = doc.add_container("Main")
        parent = main
        for i in range(20):
            child = doc.add_container(f"Level{i}")
            doc.add_reference(parent, child)
            parent = child
        found = discover(doc, main)
        assert order(doc, found) == list(reversed(found))

    def test_cycle(self):
        doc = InMemoryDocument()
        a = doc.add_container("A")
        b = doc.add_container("B")
        doc.add_reference(a, b)
        doc.add_reference(b, a)

        with pytest.raises(GraphError) as exc:
            order(doc, [a, b])
        assert exc.value.reason is GraphErrorReason.CYCLIC_REFERENCE
        assert exc.value.container == "A"
        assert exc.value.cycle == ["A", "B", "A"]

    def test_empty(self):
        assert order(InMemoryDocument(), []) == []
