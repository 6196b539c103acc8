from collections.abc import Iterable, Iterator, Sequence
from decimal import Decimal

from pydantic import TypeAdapter, ValidationError

from cart.schemas import CartLine, CartLineCandidate, CartLineKey
from core.logging import AbstractLogger, stub_logger

_lines_adapter = TypeAdapter(list[CartLine])


def _merge_line(
    lines: Sequence[CartLine], key: CartLineKey, new_line: CartLine
) -> tuple[list[CartLine], CartLine]:
    """Returns new list where new_line is either appended
    or its qty is added to the line with the same key"""
    for i, line in enumerate(lines):
        if line.key == key:
            merged = line.model_copy(update={"qty": line.qty + new_line.qty})
            return [*lines[:i], merged, *lines[i + 1 :]], merged
    return [*lines, new_line], new_line


class CartStore:
    """Ordered list of cart lines, unique by (product_id, variation_id).
    Every mutation builds the next list and swaps it in with a single assignment,
    so an operation either fully applies or leaves lines untouched."""

    def __init__(self, lines: Iterable[CartLine] = ()) -> None:
        self._lines: list[CartLine] = []
        for line in lines:
            self._lines, _ = _merge_line(self._lines, line.key, line)

    @property
    def lines(self) -> Sequence[CartLine]:
        return tuple(self._lines)

    @property
    def total(self) -> Decimal:
        return sum((line.price * line.qty for line in self._lines), Decimal(0))

    @property
    def item_count(self) -> int:
        return sum(line.qty for line in self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self._lines)

    def find(self, product_id: str, variation_id: str | None = None) -> CartLine | None:
        key = (product_id, variation_id)
        return next((line for line in self._lines if line.key == key), None)

    def add_line(self, candidate: CartLineCandidate) -> CartLine:
        # on merge only qty accumulates, descriptive fields of existing line are kept
        self._lines, line = _merge_line(
            self._lines, candidate.key, candidate.to_line()
        )
        return line

    def update_quantity(
        self, product_id: str, variation_id: str | None, qty: int
    ) -> CartLine | None:
        if qty <= 0:
            self.remove_line(product_id, variation_id)
            return None
        key = (product_id, variation_id)
        self._lines = [
            line.model_copy(update={"qty": qty}) if line.key == key else line
            for line in self._lines
        ]
        return self.find(product_id, variation_id)

    def remove_line(self, product_id: str, variation_id: str | None = None) -> bool:
        key = (product_id, variation_id)
        remaining = [line for line in self._lines if line.key != key]
        removed = len(remaining) != len(self._lines)
        self._lines = remaining
        return removed

    def clear(self) -> None:
        self._lines = []

    def dump(self) -> str:
        return _lines_adapter.dump_json(self._lines).decode()

    @classmethod
    def restore(
        cls, raw: str | bytes | None, logger: AbstractLogger = stub_logger
    ) -> "CartStore":
        if not raw:
            return cls()
        try:
            lines = _lines_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Malformed cart data, starting with empty cart",
                errors_count=e.error_count(),
            )
            return cls()
        return cls(lines)
