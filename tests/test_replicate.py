"""
Tests for duplication and relinking.

After `replicate` returns, the duplicate tree must be isomorphic to the
original, hold no reference back into the original subtree, and leave the
original untouched.
"""

import pytest

from locrep.errors import GraphError, GraphErrorReason
from locrep.graph import discover, order
from locrep.memory import InMemoryDocument
from locrep.model import NodeKind
from locrep.replicate import OutputLayout, duplicate_name, replicate, stale_references


def build_tree():
    """
    Main -> [Title, A, B]
    A    -> [C, Caption]
    B    -> [C, Logo]
    C    -> [Headline]
    """
    doc = InMemoryDocument()
    main = doc.add_container("Main")
    a = doc.add_container("A")
    b = doc.add_container("B")
    c = doc.add_container("C")
    doc.add_text(main, "Title", "Big Sale")
    doc.add_reference(main, a)
    doc.add_reference(main, b)
    doc.add_reference(a, c)
    doc.add_text(a, "Caption", "Now")
    doc.add_reference(b, c)
    doc.add_asset(b, "Logo", "logo_en.png")
    doc.add_text(c, "Headline", "Hello")
    return doc, main


def shape(doc, container):
    """Structure of a tree ignoring container names and identities."""
    out = []
    for ref in doc.references(container):
        if ref.is_container:
            out.append(("container", shape(doc, ref.target)))
        else:
            out.append((ref.kind.value, ref.target.name, doc.leaf_value(ref.target)))
    return tuple(out)


def count_leaves(doc, container):
    total = 0
    for ref in doc.references(container):
        total += count_leaves(doc, ref.target) if ref.is_container else 1
    return total


def replicate_for(doc, main, locale="en"):
    layout = OutputLayout.create(doc, "Localized_Versions", "_PRECOMPS")
    subtree = order(doc, discover(doc, main))
    return replicate(doc, main, subtree, locale, layout), layout


class TestReplicate:
    """One locale, one root."""

    def test_every_container_duplicated_once(self):
        doc, main = build_tree()
        dupes, _ = replicate_for(doc, main)
        assert len(dupes) == 4
        assert len(doc.containers) == 8

    def test_no_stale_references(self):
        doc, main = build_tree()
        dupes, _ = replicate_for(doc, main)
        assert stale_references(doc, dupes) == []

    def test_only_duplicates_referenced(self):
        doc, main = build_tree()
        dupes, _ = replicate_for(doc, main)
        duplicate_ids = {d.id for _, d in dupes}
        for _, duplicate in dupes:
            for child in duplicate.child_containers():
                assert child.id in duplicate_ids

    def test_isomorphic(self):
        doc, main = build_tree()
        dupes, _ = replicate_for(doc, main)
        assert shape(doc, dupes.root) == shape(doc, main)
        assert count_leaves(doc, dupes.root) == count_leaves(doc, main)

    def test_shared_child_stays_shared(self):
        """C is duplicated once and both A_en and B_en point at C_en."""
        doc, main = build_tree()
        dupes, _ = replicate_for(doc, main)
        a_en = dupes.by_name("A")
        b_en = dupes.by_name("B")
        c_en = dupes.by_name("C")
        assert a_en.child_containers() == [c_en]
        assert b_en.child_containers() == [c_en]

    def test_leaves_are_copies(self):
        """Editing a duplicate leaf leaves the original alone."""
        doc, main = build_tree()
        dupes, _ = replicate_for(doc, main)
        c_en = dupes.by_name("C")
        doc.set_text(c_en.leaves()[0], "Hi")

        original_c = main.child_containers()[0].child_containers()[0]
        assert doc.get_text(original_c.leaves()[0]) == "Hello"

    def test_originals_untouched(self):
        doc, main = build_tree()
        before = shape(doc, main)
        a, b = main.child_containers()
        replicate_for(doc, main)

        assert main.name == "Main"
        assert main.child_containers() == [a, b]
        assert shape(doc, main) == before

    def test_names(self):
        doc, main = build_tree()
        dupes, _ = replicate_for(doc, main, locale="zh-TW")
        assert dupes.root.name == "Main_zh_tw"
        assert sorted(d.name for _, d in dupes) == ["A_zh_tw", "B_zh_tw", "C_zh_tw", "Main_zh_tw"]

    def test_folders(self):
        """Root goes to the locale folder, everything else to _PRECOMPS."""
        doc, main = build_tree()
        dupes, layout = replicate_for(doc, main, locale="en-US")
        assert dupes.root.folder.path == "Localized_Versions/EN-US"
        for original, duplicate in dupes:
            if original is not main:
                assert duplicate.folder is layout.precomps
        assert layout.precomps.path == "Localized_Versions/_PRECOMPS"

    def test_root_without_subtree(self):
        doc = InMemoryDocument()
        main = doc.add_container("Main")
        doc.add_text(main, "Headline", "Hi")
        dupes, _ = replicate_for(doc, main)
        assert len(dupes) == 1
        assert dupes.root.leaves()[0].text == "Hi"

    def test_unordered_subtree_rejected(self):
        """A parent may not be duplicated before its children."""
        doc, main = build_tree()
        a, b = main.child_containers()
        c = a.child_containers()[0]
        layout = OutputLayout.create(doc, "Localized_Versions", "_PRECOMPS")
        with pytest.raises(GraphError) as exc:
            replicate(doc, main, [a, b, c], "en", layout)
        assert exc.value.reason is GraphErrorReason.UNORDERED_SUBTREE
        assert exc.value.container == "C"


class TestLocales:
    """Several locales in one document."""

    def test_locales_independent(self):
        doc, main = build_tree()
        en, layout = replicate_for(doc, main, "en")
        fr = replicate(doc, main, order(doc, discover(doc, main)), "fr", layout)

        en_ids = {d.id for _, d in en}
        for _, duplicate in fr:
            for child in duplicate.child_containers():
                assert child.id not in en_ids

    def test_locale_folders_reused(self):
        doc, main = build_tree()
        _, layout = replicate_for(doc, main, "en")
        replicate(doc, main, order(doc, discover(doc, main)), "en", layout)
        labels = [f.name for f in doc.folders if f.parent is layout.output]
        assert labels.count("EN") == 1
        assert labels.count("_PRECOMPS") == 1


def test_duplicate_name():
    doc = InMemoryDocument()
    main = doc.add_container("Main Comp")
    assert duplicate_name(main, "pt-BR") == "Main Comp_pt_br"


def test_leaf_kinds_preserved():
    doc, main = build_tree()
    dupes, _ = replicate_for(doc, main)
    logo = dupes.by_name("B").leaves()[0]
    assert logo.kind is NodeKind.ASSET
    assert logo.path == "logo_en.png"
