from __future__ import annotations

from pathlib import Path
from typing import Callable, Protocol


class Converter(Protocol):
    """Single-file RAW to DNG conversion.

    Returns an error description, or an empty string on success.
    """

    def convert(self, input_path: Path, output_path: Path) -> str: ...


ConverterFactory = Callable[[], Converter]
