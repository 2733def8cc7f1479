"""Scene document helpers.

Converts the flat shape records of a :class:`~scenelang.runtime.Product`
into the nested ``{"size": ..., "grid": [...]}`` document returned to
callers, converts such a document back into records, and renders
documents as JSON or YAML.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import yaml

from .runtime.interpreter import GROUP_TAG
from .runtime.product import SIZE_ID, Product, ShapeRecord

OUTPUT_FORMATS = ("json", "yaml")

# Keys every shape node carries besides its attributes
_NODE_KEYS = ("id", "parent", "tag", "children")

# Attributes a group never reports
_GROUP_STRIPPED = ("width", "height")


def _shape_node(record: ShapeRecord) -> Dict[str, Any]:
    node: Dict[str, Any] = {"id": record.id, "parent": record.parent, "tag": record.tag}
    node.update(record.attributes)
    if record.tag == GROUP_TAG:
        for key in _GROUP_STRIPPED:
            node.pop(key, None)
        node["children"] = []
    return node


def build_scene(product: Product) -> Optional[Dict[str, Any]]:
    """Fold the product's shape records into the nested scene document.

    Returns ``None`` when no size record was produced.
    """
    if product.size is None:
        return None

    root: Dict[str, Any] = {"id": SIZE_ID, "children": []}
    nodes: Dict[str, Dict[str, Any]] = {SIZE_ID: root}

    for record in product.records:
        node = _shape_node(record)
        parent = nodes.get(record.parent)
        if parent is None or "children" not in parent:
            raise ValueError(f"shape {record.id!r} refers to unknown parent {record.parent!r}")
        nodes[record.id] = node
        parent["children"].append(node)

    grid = root["children"]
    for node in grid:
        node["parent"] = None

    return {
        "size": {"id": SIZE_ID, "width": product.size.width, "height": product.size.height},
        "grid": grid,
    }


def flatten_scene(data: Dict[str, Any]) -> Product:
    """Rebuild a product from a scene document produced by :func:`build_scene`."""
    product = Product()
    size = data["size"]
    product.set_size(size["width"], size["height"])

    def walk(nodes: List[Dict[str, Any]], parent: str) -> None:
        for node in nodes:
            attributes = {k: v for k, v in node.items() if k not in _NODE_KEYS}
            product.records.append(ShapeRecord(
                id=str(node["id"]),
                parent=parent,
                tag=node["tag"],
                attributes=attributes,
            ))
            walk(node.get("children", []), str(node["id"]))

    walk(data.get("grid", []), SIZE_ID)
    product.records.sort(key=lambda record: int(record.id))
    return product


def dump_document(document: Any, output_format: str = "json", indent: int = 2) -> str:
    """Render a JSON-compatible document as JSON or YAML text."""
    if output_format == "json":
        return json.dumps(document, indent=indent)
    if output_format == "yaml":
        return yaml.safe_dump(document, sort_keys=False, indent=indent)
    raise ValueError(f"unsupported output format {output_format!r}; expected one of {OUTPUT_FORMATS}")
