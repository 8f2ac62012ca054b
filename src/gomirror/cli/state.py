"""Per-invocation state handed from the global callback to commands."""

from dataclasses import dataclass

from ..config.settings import Settings


@dataclass(frozen=True)
class CLIState:
    """Settings resolved from environment and global options.

    Commands layer their own options on top with ``model_copy`` rather than
    mutating this instance.
    """

    settings: Settings
