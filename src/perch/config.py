"""Runtime configuration.

RuntimeConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Runtime configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RuntimeConfig(poll_interval=0.05, template_dir="views")
    """

    # Readiness gate
    poll_interval: float = 1.0  # Seconds between re-evaluations of a pending gate

    # Component ids
    id_prefix: str = "m"  # Auto-assigned ids look like "m1", "m2", ...

    # Templates
    template_dir: str | Path | None = None  # Named templates; inline sources always work
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Markup
    default_tag: str = "div"
