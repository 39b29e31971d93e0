"""Tabular rendering of lookup results."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.measure import Measurement
from rich.table import Table
from rich.text import Text

# Upper bound used when measuring the natural width of a table.
MEASURE_WIDTH = 10_000


class ResultTable:
    """Accumulates fixed-width rows and renders them under a fixed header."""

    def __init__(self, header: Sequence[str]) -> None:
        self.header: Tuple[str, ...] = tuple(header)
        self._rows: List[Tuple[str, ...]] = []

    @property
    def rows(self) -> List[Tuple[str, ...]]:
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def append(self, row: Sequence[str]) -> None:
        if len(row) != len(self.header):
            raise ValueError(f"Row has {len(row)} columns, header has {len(self.header)}")
        self._rows.append(tuple(row))

    def to_rich(self) -> Table:
        table = Table(box=box.SQUARE, show_lines=False)
        for name in self.header:
            table.add_column(name.upper(), no_wrap=True, overflow="fold")
        for row in self._rows:
            # Text cells bypass markup parsing of API-supplied values.
            table.add_row(*(Text(value) for value in row))
        return table

    def render(self, console: Optional[Console] = None) -> None:
        """Print the table; cell values are never cropped.

        When the output is not a terminal (a pipe or a file) the console is
        widened to the table's natural width instead of rich's 80 column default.
        """
        console = console or Console()
        table = self.to_rich()
        if not console.is_terminal:
            options = console.options.update_width(MEASURE_WIDTH)
            natural = Measurement.get(console, options, table).maximum
            if natural > console.width:
                console.width = natural
        console.print(table)
