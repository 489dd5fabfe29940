# slot_reels/domain/machine/entities/symbol_table.py
from typing import Iterable, Iterator, Tuple


class SymbolTable:
    """
    Fixed, ordered strip of display symbols printed on one reel.
    Immutable after construction.
    """
    def __init__(self, symbols: Iterable[str], name: str = ""):
        """
        Initialize a symbol table.

        Args:
            symbols: Symbols in strip order
            name: Optional label used in logs

        Raises:
            ValueError: If no symbols are given
        """
        self._symbols: Tuple[str, ...] = tuple(symbols)
        if not self._symbols:
            raise ValueError(f"Symbol table {name!r} must contain at least one symbol")
        self.name = name

    @property
    def symbols(self) -> Tuple[str, ...]:
        return self._symbols

    def window(self, position: int, size: int = 3) -> Tuple[str, ...]:
        """
        Get the symbols visible in a window starting at the given position.
        Wraps around the end of the strip.

        Args:
            position: Index of the topmost symbol
            size: Number of symbols to return (default: 3)

        Returns:
            Tuple of visible symbols, top to bottom
        """
        length = len(self._symbols)
        return tuple(self._symbols[(position + i) % length] for i in range(size))

    def __getitem__(self, index: int) -> str:
        return self._symbols[index]

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SymbolTable):
            return NotImplemented
        return self._symbols == other._symbols

    def __hash__(self) -> int:
        return hash(self._symbols)

    def __repr__(self) -> str:
        return f"SymbolTable(name={self.name}, length={len(self._symbols)})"
