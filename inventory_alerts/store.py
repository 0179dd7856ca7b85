"""YAML persistence layer for the tracked inventory."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Union

import yaml

from .matcher import MatchRule

PathLike = Union[str, os.PathLike]

_REQUIRED_KEYS = ("product", "vendor", "url")


class ParseError(Exception):
    """Raised when the state file is not a valid list of inventory items."""


@dataclass
class InventoryItem:
    product: str
    vendor: str
    url: str
    in_stock: bool = False
    matches: List[MatchRule] = field(default_factory=list)

    @property
    def status(self) -> str:
        return "In Stock" if self.in_stock else "Out of Stock"


def _item_from_dict(data: dict, index: int) -> InventoryItem:
    if not isinstance(data, dict):
        raise ParseError(f"Item #{index} is not a mapping")
    missing = [k for k in _REQUIRED_KEYS if k not in data]
    if missing:
        raise ParseError(f"Item #{index} is missing {', '.join(missing)}")
    for key in _REQUIRED_KEYS:
        if not isinstance(data[key], str):
            raise ParseError(f"Item #{index}: {key} must be a string, got {data[key]!r}")

    in_stock = data.get("in_stock", data.get("inStock", False))
    if not isinstance(in_stock, bool):
        raise ParseError(f"Item #{index}: in_stock must be true or false, got {in_stock!r}")

    raw_matches = data.get("matches")
    if raw_matches is None:
        raw_matches = []
    elif not isinstance(raw_matches, list):
        raise ParseError(f"Item #{index}: matches must be a list")
    try:
        matches = [MatchRule.from_mapping(m) for m in raw_matches]
    except ValueError as e:
        raise ParseError(f"Item #{index}: {e}") from e

    return InventoryItem(
        product=data["product"],
        vendor=data["vendor"],
        url=data["url"],
        in_stock=in_stock,
        matches=matches,
    )


def _item_to_dict(item: InventoryItem) -> dict:
    return {
        "product": item.product,
        "vendor": item.vendor,
        "url": item.url,
        "in_stock": item.in_stock,
        "matches": [m.to_mapping() for m in item.matches],
    }


def loads(text: str) -> List[InventoryItem]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ParseError(f"Malformed YAML: {e}") from e
    if data is None:
        return []
    if not isinstance(data, list):
        raise ParseError(f"Expected a list of items, got {type(data).__name__}")
    return [_item_from_dict(d, i) for i, d in enumerate(data)]


def dumps(items: Iterable[InventoryItem]) -> str:
    return yaml.safe_dump(
        [_item_to_dict(i) for i in items],
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def load(path: PathLike) -> List[InventoryItem]:
    """Read the whole collection from ``path``.

    Raises OSError if the file cannot be read and ParseError if its
    contents are not a valid item list.
    """
    text = Path(path).read_text(encoding="utf-8")
    return loads(text)


def save(path: PathLike, items: Iterable[InventoryItem]) -> None:
    """
    Overwrite ``path`` with the serialized collection.
    The new contents go to a temp file in the same directory first and
    are swapped in with os.replace, so readers see the old file or the new one.
    """
    target = Path(path)
    text = dumps(items)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


__all__ = ["InventoryItem", "ParseError", "load", "loads", "save", "dumps"]
