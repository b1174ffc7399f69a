from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

A single bar counts rows written during the bulk write. In non-TTY
environments (CI, redirected output) no bar is created so logs stay free of
ANSI control sequences.
"""

__all__ = [
    "WriteProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class WriteProgress:
    """Row counter for the bulk write, shown as a tqdm bar on a TTY."""

    def __init__(self, total_rows: int, *, description: str = "Writing rows") -> None:
        self.total_rows = total_rows
        self.description = description
        self.written = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_batch(self, table: str) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({table})")

    def advance(self, rows: int) -> None:
        self.written += rows
        if self.enabled and self.pbar is not None:
            self.pbar.update(rows)
            self.pbar.set_description(self.description)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> WriteProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
