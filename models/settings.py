"""Engine settings for Inkwell Review."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class EngineSettings:
    """
    Tunables for diffing and rendering.

    Attributes:
        max_text_length: Maximum characters per side accepted by the diff
        diff_timeout: diff-match-patch time limit in seconds (0 = unlimited)
        markdown_extensions: Python-Markdown extensions used for rendering
        slow_operation_threshold: Seconds after which an operation is logged as slow
    """

    max_text_length: int = 500000
    diff_timeout: float = 0.0
    markdown_extensions: List[str] = field(default_factory=lambda: ["extra", "sane_lists"])
    slow_operation_threshold: float = 1.0
