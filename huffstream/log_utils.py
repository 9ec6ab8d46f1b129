#!/usr/bin/env python3
import logging
import os
from datetime import datetime
from typing import Optional, Union


DEBUG_LOW = 1
DEBUG_HIGH = 4

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _make_log_dir(path: Union[str, os.PathLike]) -> str:
    os.makedirs(path, exist_ok=True)
    return str(path)


def _file_handler(log_dir: str) -> logging.FileHandler:
    _make_log_dir(log_dir)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    handler = logging.FileHandler(os.path.join(log_dir, f"run_{timestamp}.log"))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logging(name: str = "huffstream", log_dir: Optional[str] = None, debug_level: int = 0) -> logging.Logger:
    level = logging.DEBUG if debug_level > 0 else logging.INFO
    root = logging.getLogger()
    if not root.handlers:
        handlers = [logging.StreamHandler()]
        if log_dir:
            handlers.append(_file_handler(log_dir))
        logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    else:
        # Root is already configured elsewhere; still honour log_dir.
        root.setLevel(level)
        if log_dir:
            root.addHandler(_file_handler(log_dir))
    return logging.getLogger(name)
