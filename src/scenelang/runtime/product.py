"""
The scene accumulator built up while a program is evaluated.

A Product holds at most one size record and an append-only list of shape
records. Shapes point at their parent by id; the tree is only assembled
when the output document is built (see ``scenelang.scene``).
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Union
from contextlib import contextmanager

Number = Union[int, float]

SIZE_ID = "size"


@dataclass
class SizeRecord:
    """The root canvas declared by 'size'."""
    width: Number
    height: Number
    id: str = SIZE_ID


@dataclass
class ShapeRecord:
    """One evaluated tag."""
    id: str
    parent: str
    tag: str
    attributes: Dict[str, Number] = field(default_factory=dict)


@dataclass
class Product:
    """
    Incremental scene graph.

    `current_scope` is "" before 'size' is evaluated, then "size" or the id
    of the group whose body is being evaluated.
    """
    size: Optional[SizeRecord] = None
    records: List[ShapeRecord] = field(default_factory=list)
    current_scope: str = ""

    @property
    def has_size(self) -> bool:
        return self.size is not None

    def set_size(self, width: Number, height: Number) -> SizeRecord:
        """Record the root canvas. Only one size record may exist."""
        if self.size is not None:
            raise ValueError("size is already recorded")
        self.size = SizeRecord(width=width, height=height)
        self.current_scope = SIZE_ID
        return self.size

    def add_shape(self, tag: str, attributes: Dict[str, Number]) -> ShapeRecord:
        """Append a shape under the current scope with the next sequential id."""
        record = ShapeRecord(
            id=str(len(self.records)),
            parent=self.current_scope,
            tag=tag,
            attributes=dict(attributes),
        )
        self.records.append(record)
        return record

    @contextmanager
    def scope(self, shape_id: str) -> Iterator[str]:
        """
        Attach new shapes to `shape_id` for the duration of the block.

        Usage:
            with product.scope(record.id):
                # shapes added here get record.id as their parent
                ...
        """
        old_scope = self.current_scope
        self.current_scope = shape_id
        try:
            yield shape_id
        finally:
            self.current_scope = old_scope
