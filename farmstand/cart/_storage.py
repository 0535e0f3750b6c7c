"""
Cart persistence — storage protocol, slot backends and the JSON codec.

Persisted layout (one named slot):

    {"version": 1, "lines": [{"product": {...}, "quantity": 2}, ...]}

A bare JSON array of lines (the older, unversioned layout) is still read.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

import structlog
from kungfu import Error, Ok, Result
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from farmstand.cart._types import CartLine
from farmstand.catalog import ProductRecord

logger = structlog.get_logger(__name__)

SCHEMA_VERSION = 1


# ═══════════════════════════════════════════════════════════════════════════════
# Storage Protocol — what CartStore depends on
# ═══════════════════════════════════════════════════════════════════════════════


class CartStorage(Protocol):
    """
    Durable home for cart lines.

    load() returns None when nothing usable is stored. save() overwrites
    whatever was stored before.
    """

    def load(self) -> list[CartLine] | None:
        ...

    def save(self, lines: list[CartLine]) -> None:
        ...


@dataclass(frozen=True, slots=True)
class StorageError:
    """Cart slot could not be decoded."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Codec
# ═══════════════════════════════════════════════════════════════════════════════


class _LineRecord(BaseModel):
    product: ProductRecord
    quantity: int = Field(ge=1)


class _CartRecord(BaseModel):
    version: Literal[1] = SCHEMA_VERSION
    lines: list[_LineRecord]


_legacy = TypeAdapter(list[_LineRecord])


def encode_lines(lines: list[CartLine]) -> str:
    record = _CartRecord(
        lines=[
            _LineRecord(product=ProductRecord.from_product(line.product), quantity=line.quantity)
            for line in lines
        ],
    )
    return record.model_dump_json()


def decode_lines(text: str) -> Result[list[CartLine], StorageError]:
    """
    Decode a stored slot.

    Lines sharing a product id are merged (quantities summed, first position
    kept) so a hand-edited slot cannot break id uniqueness.
    """
    try:
        if text.lstrip().startswith("["):
            records = _legacy.validate_json(text)
        else:
            records = _CartRecord.model_validate_json(text).lines
    except ValidationError as e:
        return Error(StorageError(f"Unreadable cart slot: {e.error_count()} error(s)", e))

    merged: dict[str, int] = {}
    products: dict[str, ProductRecord] = {}
    for record in records:
        pid = record.product.id
        merged[pid] = merged.get(pid, 0) + record.quantity
        products.setdefault(pid, record.product)

    try:
        return Ok([CartLine(products[pid].to_product(), qty) for pid, qty in merged.items()])
    except ValueError as e:
        return Error(StorageError(f"Invalid cart line: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Slots — raw text key/value backends
# ═══════════════════════════════════════════════════════════════════════════════


class Slot(Protocol):
    """A single named text slot (browser localStorage semantics)."""

    @property
    def name(self) -> str:
        ...

    def read(self) -> str | None:
        ...

    def write(self, text: str) -> None:
        ...


class MemorySlot:
    """In-memory slot. `data` may be shared to simulate a reload."""

    def __init__(self, name: str = "farm-poultry-cart", data: dict[str, str] | None = None) -> None:
        self._name = name
        self.data: dict[str, str] = data if data is not None else {}

    @property
    def name(self) -> str:
        return self._name

    def read(self) -> str | None:
        return self.data.get(self._name)

    def write(self, text: str) -> None:
        self.data[self._name] = text


class FileSlot:
    """
    Slot stored as one JSON file.

    Writes go to a temp file in the same directory and are moved into place,
    so a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def name(self) -> str:
        return self._path.stem

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> str | None:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


# ═══════════════════════════════════════════════════════════════════════════════
# SlotStorage — CartStorage over a Slot
# ═══════════════════════════════════════════════════════════════════════════════


class SlotStorage:
    """
    CartStorage that keeps the JSON layout in a Slot.

    Example:
        storage = SlotStorage(FileSlot(settings.cart_path))
        store = CartStore(storage)
    """

    def __init__(self, slot: Slot) -> None:
        self._slot = slot

    @property
    def slot(self) -> Slot:
        return self._slot

    def load(self) -> list[CartLine] | None:
        text = self._slot.read()
        if text is None or not text.strip():
            return None

        match decode_lines(text):
            case Ok(lines):
                return lines
            case Error(err):
                logger.warning(
                    "Discarding corrupted cart slot",
                    slot=self._slot.name,
                    error=err.message,
                )
                return None

    def save(self, lines: list[CartLine]) -> None:
        self._slot.write(encode_lines(lines))


__all__ = (
    "SCHEMA_VERSION",
    "CartStorage",
    "StorageError",
    "encode_lines",
    "decode_lines",
    "Slot",
    "MemorySlot",
    "FileSlot",
    "SlotStorage",
)
