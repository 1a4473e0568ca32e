"""Logging setup for the ``allocgen`` command.

One call configures the root logger:
    - stderr handler, human-readable (ANSI level colors on a terminal)
    - optional file handler, human-readable or JSON lines
    - contextual fields (e.g. ``app=allocgen``) appended to every record
    - Python warnings routed into logging

Public API:
    setup_logging("INFO", "logs/allocgen.log", json=True, context={"app": "allocgen"})
    push_context(config="generator.yaml")
    install_excepthook()

Format examples:
    Human: 2026-10-19T13:45:12.345Z | INFO     | app=allocgen | Total allocations found: 3
    JSON:  {"t": "2026-10-19T13:45:12.345Z", "lvl": "INFO", "name": "...", "msg": "...", "app": "allocgen"}

Timestamps are always UTC.  Calling setup_logging again replaces the
handlers it installed earlier instead of stacking new ones.
"""

import contextvars
import json as jsonlib
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


_context_var: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    'logging_context', default={}
)

# Handlers installed by setup_logging (removed on reconfiguration)
_handlers: List[logging.Handler] = []

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET = '\033[0m'


def _utc_stamp(created: float) -> str:
    ts = datetime.fromtimestamp(created, tz=timezone.utc)
    return ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'


class ContextFormatter(logging.Formatter):
    """Render records with the current context fields.

    Parameters
    ----------
    as_json : bool
        Emit one JSON object per line instead of the ``|``-separated form.
    use_color : bool
        Wrap the level name in ANSI colors (human form only).
    """

    def __init__(self, as_json: bool = False, use_color: bool = False):
        super().__init__()
        self.as_json = as_json
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        context = _context_var.get()
        stamp = _utc_stamp(record.created)

        if self.as_json:
            payload = {
                't': stamp,
                'lvl': record.levelname,
                'name': record.name,
                'msg': record.getMessage(),
                **context,
            }
            if record.exc_info:
                payload['exc'] = self.formatException(record.exc_info)
            return jsonlib.dumps(payload, default=str)

        level = f"{record.levelname:8s}"
        if self.use_color and record.levelname in _LEVEL_COLORS:
            level = f"{_LEVEL_COLORS[record.levelname]}{level}{_RESET}"

        fields = [stamp, level]
        if context:
            fields.append(' '.join(f"{k}={v}" for k, v in context.items()))
        fields.append(record.getMessage())
        line = ' | '.join(fields)

        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Configure the root logger.

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL"
    log_file : str, optional
        Also log to this file (parent directories are created)
    json : bool
        Write the file log as JSON lines
    context : dict, optional
        Fields added to every record (see push_context)

    Returns
    -------
    list[logging.Handler]
        Handlers installed by this call.

    Raises
    ------
    ValueError
        If *log_level* is not a known level name.
    """
    global _handlers

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    root = logging.getLogger()
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ContextFormatter(use_color=sys.stderr.isatty()))
    installed: List[logging.Handler] = [console]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(ContextFormatter(as_json=json))
        installed.append(file_handler)

    root.setLevel(level)
    for handler in installed:
        root.addHandler(handler)
    _handlers = installed

    if context:
        push_context(**context)

    logging.captureWarnings(True)
    return installed


def push_context(**kwargs: Any) -> None:
    """Add fields to every subsequent record in this context."""
    _context_var.set({**_context_var.get(), **kwargs})


def install_excepthook() -> None:
    """Log uncaught exceptions (except Ctrl+C) at CRITICAL before exit."""
    def log_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logging.getLogger(__name__).critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = log_exception
