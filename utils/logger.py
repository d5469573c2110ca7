"""
Logger Configuration
Console (Rich) and optional file logging
"""
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

from rich.logging import RichHandler
from rich.console import Console


# stderr keeps stdout free for --version output
console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_FORMAT_SIMPLE = "%(message)s"

# handlers installed by setup_logger, per logger name
_HANDLERS: Dict[Optional[str], List[logging.Handler]] = {}


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: Optional[str] = None,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    use_rich: bool = True,
) -> logging.Logger:
    """
    Configure a logger.
    
    Calling it again for the same name adjusts the level and attaches the
    file handler if one was not attached yet, so the CLI can log startup
    errors before the configuration file is read.
    
    Args:
        name: logger name, None configures the root logger so every
            module-level ``logging.getLogger(__name__)`` inherits it
        level: logging level (int or name such as "DEBUG")
        log_file: optional path of a plain-text log file
        use_rich: pretty console output through Rich
        
    Returns:
        The configured logger
    """
    level = _resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    
    handlers = _HANDLERS.setdefault(name, [])
    
    if not handlers:
        if use_rich:
            console_handler = RichHandler(
                console=console,
                show_time=True,
                show_path=False,
                rich_tracebacks=True,
            )
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE))
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)
        handlers.append(console_handler)
    
    has_file = any(isinstance(handler, logging.FileHandler) for handler in handlers)
    if log_file and not has_file:
        file_path = Path(log_file)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        
        file_handler = logging.FileHandler(file_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
        handlers.append(file_handler)
    
    for handler in handlers:
        handler.setLevel(level)
    
    return logger
