"""Rich rendering to strings.

``format_result`` returns text, so Rich output goes to an in-memory
console and is read back. Color codes are only emitted when the real
stdout is a terminal.
"""

from __future__ import annotations

import sys
from io import StringIO

from rich.console import Console, RenderableType
from rich.theme import Theme

SEGSEQ_THEME = Theme(
    {
        "seg.name": "bold",
        "seg.table": "dim",
        "seg.optimizer": "cyan",
        "seg.value": "magenta",
        "seg.missing": "dim italic",
    }
)

DEFAULT_WIDTH = 120


def render(*renderables: RenderableType, width: int = DEFAULT_WIDTH) -> str:
    """Render *renderables* with the segseq theme and return the text."""
    console = Console(
        file=StringIO(),
        theme=SEGSEQ_THEME,
        force_terminal=sys.stdout.isatty(),
        highlight=False,
        width=width,
    )
    for renderable in renderables:
        console.print(renderable)
    assert isinstance(console.file, StringIO)
    return console.file.getvalue().rstrip()
