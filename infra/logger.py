"""
Pipeline logging.

PipelineLogger wraps a stdlib logger with run context (run_id, stage) and
keyword fields that land as top-level keys in JSONL output:

    with create_logger("report-2024", "extract", log_dir=Path("logs")) as logger:
        logger.info("Extracting", pages=12)
        logger.warning("Retrying", page=3, attempt=2, delay_seconds=4.6)

Handlers are created lazily on first log so an unused logger never touches
the filesystem. Without log_dir no JSONL file is written.
"""

import json
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

FIELD_NAMES = (
    'run_id',
    'stage',
    'document',
    'page',
    'operation',
    'attempt',
    'delay_seconds',
    'workers',
    'pages',
    'duration_seconds',
    'error',
)


class FlushingFileHandler(logging.FileHandler):
    """FileHandler that flushes after every emit for real-time log visibility."""
    def emit(self, record):
        super().emit(record)
        self.flush()


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        for field in FIELD_NAMES:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


class PipelineLogger:
    def __init__(
        self,
        run_id: str,
        stage: str,
        log_dir: Optional[Path] = None,
        console_output: bool = False,
        json_output: bool = True,
        level: str = "INFO",
        filename: str = None
    ):
        self.run_id = run_id
        self.stage = stage
        self.log_dir = Path(log_dir) if log_dir is not None else None
        self.console_output = console_output
        self.json_output = json_output and self.log_dir is not None
        self.level = level
        self.filename = filename or f"{stage}.jsonl"

        self._logger = None
        self._initialized = False
        self._init_lock = threading.Lock()
        self.log_file = None

    def _ensure_initialized(self):
        if self._initialized:
            return

        with self._init_lock:
            if not self._initialized:
                self._initialize()

    def _initialize(self):
        logger_name = f"inkwell.{self.stage}.{id(self)}"
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(getattr(logging, self.level.upper()))
        self._logger.propagate = False

        if self.console_output:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
            self._logger.addHandler(console_handler)

        if self.json_output:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            json_file = self.log_dir / self.filename
            json_handler = FlushingFileHandler(json_file, mode='a', encoding='utf-8')
            json_handler.setFormatter(JSONFormatter())
            self._logger.addHandler(json_handler)
            self.log_file = json_file

        if not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

        self._initialized = True

    @property
    def logger(self) -> logging.Logger:
        self._ensure_initialized()
        return self._logger

    def child(self, stage: str) -> "PipelineLogger":
        """Logger for a sub-stage sharing this logger's run, directory and outputs."""
        return PipelineLogger(
            self.run_id,
            stage,
            log_dir=self.log_dir,
            console_output=self.console_output,
            json_output=self.json_output,
            level=self.level,
        )

    def _log(self, level: str, message: str, **kwargs):
        reserved_params = {}
        for param in ['exc_info', 'stack_info', 'stacklevel']:
            if param in kwargs:
                reserved_params[param] = kwargs.pop(param)

        extra = {
            'run_id': self.run_id,
            'stage': self.stage,
            **kwargs
        }

        self.logger.log(
            getattr(logging, level.upper()),
            message,
            extra=extra,
            **reserved_params
        )

    def debug(self, message: str, **kwargs):
        self._log('DEBUG', message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log('INFO', message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log('WARNING', message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log('ERROR', message, **kwargs)

    def close(self):
        if self._initialized and self._logger:
            for handler in self._logger.handlers[:]:
                handler.close()
                self._logger.removeHandler(handler)
            self._initialized = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_logger(run_id: str, stage: str, **kwargs) -> PipelineLogger:
    return PipelineLogger(run_id, stage, **kwargs)
