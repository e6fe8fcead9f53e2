"""
Tests for DOT diagram generator.

These tests verify that container graphs are correctly converted to Graphviz DOT format.

Tests cover:
    - Container and leaf nodes
    - Reference edges labelled by slot
    - Root highlighting
    - Special character escaping
    - Shared sub-containers drawn once
"""

from locrep.backends.dot_generator import generate_dot, save_dot_file
from locrep.examples import build_example_campaign, build_simple_composition
from locrep.memory import InMemoryDocument


class TestDotBasicStructure:
    """Overall DOT layout."""

    def test_header_and_footer(self):
        doc = build_simple_composition()
        dot = generate_dot(doc, doc.find_container("Main"))
        assert dot.startswith("digraph composition {")
        assert dot.rstrip().endswith("}")

    def test_root_highlighted(self):
        doc = build_simple_composition()
        main = doc.find_container("Main")
        dot = generate_dot(doc, main)
        assert f'"{main.id}" [label="Main", fillcolor=lightgreen];' in dot
        sub = doc.find_container("Sub")
        assert f'"{sub.id}" [label="Sub", fillcolor=lightblue];' in dot

    def test_leaf_shapes_and_values(self):
        doc = build_example_campaign()
        dot = generate_dot(doc, doc.find_container("Main_Comp"))
        assert 'label="Headline\\nWelcome", shape=note' in dot
        assert 'label="Logo\\nassets/logo_en.png", shape=folder' in dot


class TestDotEdges:
    """One edge per reference slot."""

    def test_slot_labels(self):
        doc = build_simple_composition()
        main = doc.find_container("Main")
        sub = doc.find_container("Sub")
        dot = generate_dot(doc, main)
        assert f'"{main.id}" -> "{sub.id}" [label="0"];' in dot

    def test_shared_container_once(self):
        doc = build_example_campaign()
        logo = doc.find_container("Logo_Comp")
        dot = generate_dot(doc, doc.find_container("Main_Comp"))
        assert dot.count(f'"{logo.id}" [label="Logo_Comp"') == 1
        assert dot.count(f'-> "{logo.id}"') == 2

    def test_unreachable_not_drawn(self):
        doc = build_simple_composition()
        doc.add_container("Orphan")
        dot = generate_dot(doc, doc.find_container("Main"))
        assert "Orphan" not in dot


class TestDotEscaping:
    """Special characters in names and values."""

    def test_quotes_and_newlines(self):
        doc = InMemoryDocument()
        main = doc.add_container('Say "hi"')
        doc.add_text(main, "Body", "one\ntwo")
        dot = generate_dot(doc, main)
        assert 'Say \\"hi\\"' in dot
        assert "Body\\none\\ntwo" in dot

    def test_long_values_truncated(self):
        doc = InMemoryDocument()
        main = doc.add_container("Main")
        doc.add_text(main, "Body", "x" * 100)
        dot = generate_dot(doc, main)
        assert "x" * 27 + "..." in dot
        assert "x" * 28 not in dot


def test_save_dot_file(tmp_path):
    doc = build_simple_composition()
    path = tmp_path / "main.dot"
    save_dot_file(doc, doc.find_container("Main"), str(path))
    assert path.read_text(encoding="utf-8").startswith("digraph composition {")
