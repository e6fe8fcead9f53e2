"""
Serialization helpers for in-memory documents and reports.

Provides lossless JSON/YAML round-trip via an intermediate dict
representation. The structure is kept flat and explicit:

    folders:    [{id, name, parent}]
    containers: [{id, name, folder, references: [node id, ...]}]
    leaves:     [{id, name, kind, text | path, missing_font}]

References are stored as node ids so shared sub-containers stay shared.
"""
from __future__ import annotations

import json
import os
import re
from typing import Any, Callable, Dict, Iterable, Optional

import yaml

from locrep.memory import InMemoryDocument
from locrep.model import AssetLeaf, Container, Folder, Leaf, NodeKind, Report, TextLeaf

_DIGITS_RE = re.compile(r"(\d+)$")


def folder_to_dict(f: Folder) -> Dict[str, Any]:
    return {"id": f.id, "name": f.name, "parent": f.parent.id if f.parent else None}


def container_to_dict(c: Container) -> Dict[str, Any]:
    return {
        "id": c.id,
        "name": c.name,
        "folder": c.folder.id if c.folder else None,
        "references": [ref.target.id for ref in c.references],
    }


def leaf_to_dict(leaf: Leaf) -> Dict[str, Any]:
    if leaf.kind is NodeKind.TEXT:
        d = {"id": leaf.id, "name": leaf.name, "kind": "text", "text": leaf.text}
        if leaf.missing_font:
            d["missing_font"] = True
        return d
    return {"id": leaf.id, "name": leaf.name, "kind": "asset", "path": leaf.path}


def leaf_from_dict(d: Dict[str, Any]) -> Leaf:
    kind = d.get("kind", "text")
    if kind == "text":
        return TextLeaf(id=d["id"], name=d["name"], text=d.get("text", ""),
                        missing_font=bool(d.get("missing_font", False)))
    if kind == "asset":
        return AssetLeaf(id=d["id"], name=d["name"], path=d.get("path", ""))
    raise TypeError(f"Unsupported leaf kind: {kind}")


def document_to_dict(doc: InMemoryDocument) -> Dict[str, Any]:
    return {
        "folders": [folder_to_dict(f) for f in doc.folders],
        "containers": [container_to_dict(c) for c in doc.containers],
        "leaves": [leaf_to_dict(leaf) for leaf in doc.leaves.values()],
    }


def _max_suffix(ids: Iterable[str]) -> int:
    highest = 0
    for node_id in ids:
        match = _DIGITS_RE.search(node_id)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def document_from_dict(d: Dict[str, Any],
                       resource_exists: Optional[Callable[[str], bool]] = None) -> InMemoryDocument:
    doc = InMemoryDocument(resource_exists=resource_exists)
    d = d or {}

    folders: Dict[str, Folder] = {}
    for fd in d.get("folders", []):
        folders[fd["id"]] = Folder(id=fd["id"], name=fd["name"])
    for fd in d.get("folders", []):
        parent = fd.get("parent")
        if parent is not None:
            if parent not in folders:
                raise ValueError(f"Folder '{fd['name']}' has unknown parent '{parent}'")
            folders[fd["id"]].parent = folders[parent]
    doc.folders = list(folders.values())

    leaves = {ld["id"]: leaf_from_dict(ld) for ld in d.get("leaves", [])}
    doc.leaves.update(leaves)
    containers: Dict[str, Container] = {}
    for cd in d.get("containers", []):
        folder_id = cd.get("folder")
        if folder_id is not None and folder_id not in folders:
            raise ValueError(f"Container '{cd['name']}' is in unknown folder '{folder_id}'")
        containers[cd["id"]] = doc.add_container(
            cd["name"], folder=folders.get(folder_id) if folder_id else None, node_id=cd["id"]
        )

    for cd in d.get("containers", []):
        container = containers[cd["id"]]
        for target_id in cd.get("references", []):
            target = containers.get(target_id) or leaves.get(target_id)
            if target is None:
                raise ValueError(f"Container '{cd['name']}' references unknown node '{target_id}'")
            doc.add_reference(container, target)

    doc.bump_ids(_max_suffix(list(folders) + list(containers) + list(leaves)))
    return doc


def document_to_json(doc: InMemoryDocument) -> str:
    return json.dumps(document_to_dict(doc), indent=2, ensure_ascii=False)


def document_from_json(s: str, resource_exists: Optional[Callable[[str], bool]] = None) -> InMemoryDocument:
    return document_from_dict(json.loads(s), resource_exists=resource_exists)


def document_to_yaml(doc: InMemoryDocument) -> str:
    return yaml.safe_dump(document_to_dict(doc), allow_unicode=True, sort_keys=False)


def document_from_yaml(s: str, resource_exists: Optional[Callable[[str], bool]] = None) -> InMemoryDocument:
    return document_from_dict(yaml.safe_load(s), resource_exists=resource_exists)


def _is_json(path: str) -> bool:
    ext = os.path.splitext(path)[1].lower()
    if ext == ".json":
        return True
    if ext in (".yaml", ".yml"):
        return False
    raise ValueError(f"Unsupported document format '{ext}' (use .json, .yaml or .yml)")


def load_document(path: str, resource_exists: Optional[Callable[[str], bool]] = None) -> InMemoryDocument:
    as_json = _is_json(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Document file not found: {path}")
    try:
        if as_json:
            return document_from_json(content, resource_exists=resource_exists)
        return document_from_yaml(content, resource_exists=resource_exists)
    except (KeyError, TypeError, AttributeError, yaml.YAMLError) as e:
        raise ValueError(f"Malformed document {path}: {e!r}")


def save_document(doc: InMemoryDocument, path: str) -> None:
    content = document_to_json(doc) if _is_json(path) else document_to_yaml(doc)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def report_to_dict(report: Report) -> Dict[str, Any]:
    return {
        "locales": report.locales,
        "applied": report.applied,
        "skipped": report.skipped,
        "failed": report.failed,
        "errors": list(report.errors),
    }


def report_to_json(report: Report) -> str:
    return json.dumps(report_to_dict(report), indent=2, ensure_ascii=False)
