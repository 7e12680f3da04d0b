"""CLI command modules.

Each module defines one subcommand; main.LAZY_COMMANDS maps command names
to them so they are imported only when invoked.
"""

from __future__ import annotations

__all__: list[str] = []
