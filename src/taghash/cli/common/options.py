"""Reusable Typer option declarations."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from taghash.shared.constants import CLIHelp

CacheDirOption = Annotated[Path | None, typer.Option("--cache-dir", help=CLIHelp.CACHE_DIR_HELP)]
CacheTTLOption = Annotated[str | None, typer.Option("--cache-ttl", help=CLIHelp.CACHE_TTL_HELP)]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help=CLIHelp.CONFIG_HELP, exists=True, dir_okay=False),
]
LogLevelOption = Annotated[str | None, typer.Option("--log-level", help=CLIHelp.LOG_LEVEL_HELP)]
