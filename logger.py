"""
Logging System for NavSim.
Structured logging with console output, rotating JSON-annotated log files
and a dedicated navigation event journal.
"""
import logging
import logging.handlers
import time
import json
import traceback
from pathlib import Path
from typing import Optional, Dict, Any, Union
from enum import Enum, auto
from contextlib import contextmanager
from datetime import datetime
import uuid
class LogLevel(Enum):
    """Log levels including a TRACE level below DEBUG."""
    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50
class LogCategory(Enum):
    """Categories for navigation logging."""
    SYSTEM = auto()
    ROUTE = auto()
    SIMULATION = auto()
    GUIDANCE = auto()
    USER_ACTION = auto()
    NAVIGATION = auto()
class StructuredFormatter(logging.Formatter):
    """Formatter that appends structured fields as JSON."""
    def __init__(self, include_json=True):
        super().__init__()
        self.include_json = include_json
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        basic_line = f"[{timestamp}] {record.levelname:8} {record.name}: {record.getMessage()}"
        structured_data = {}
        for key, value in record.__dict__.items():
            if key.startswith('field_') or key in ['category', 'session_id']:
                structured_data[key] = value
        if record.exc_info:
            structured_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }
        structured_data['location'] = {
            'filename': record.filename,
            'line': record.lineno,
            'function': record.funcName
        }
        if structured_data and self.include_json:
            json_data = json.dumps(structured_data, default=str, ensure_ascii=False)
            return f"{basic_line} | {json_data}"
        return basic_line
class NavSimLogger:
    """Logger for NavSim with navigation-specific helpers."""
    def __init__(self, name: str = "navsim", log_dir: Optional[Path] = None,
                 console_level: int = logging.INFO):
        self.name = name
        self.session_id = str(uuid.uuid4())[:8]
        if log_dir is None:
            log_dir = Path.home() / "NavSim" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._setup_loggers(console_level)
        self.debug("NavSim logging system initialized",
                   category=LogCategory.SYSTEM,
                   session_id=self.session_id,
                   log_dir=str(self.log_dir))
    def _setup_loggers(self, console_level: int):
        """Setup main logger and handlers."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(logging.DEBUG)
        # Replace handlers left over from a previous setup_logger() call
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()
        self.logger.propagate = False
        console_handler = logging.StreamHandler()
        console_handler.setLevel(console_level)
        console_handler.setFormatter(StructuredFormatter(include_json=False))
        self.logger.addHandler(console_handler)
        file_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{self.name}.log", maxBytes=10*1024*1024, backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(StructuredFormatter(include_json=True))
        self.logger.addHandler(file_handler)
        # Navigation journal is written explicitly by navigation_event()
        self.navigation_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{self.name}_navigation.log", maxBytes=5*1024*1024, backupCount=3,
            encoding="utf-8"
        )
        self.navigation_handler.setLevel(logging.INFO)
        self.navigation_handler.setFormatter(StructuredFormatter(include_json=True))
        error_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{self.name}_errors.log", maxBytes=5*1024*1024, backupCount=5,
            encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(StructuredFormatter(include_json=True))
        self.logger.addHandler(error_handler)
    def _build_extra(self, category: Optional[Union[LogCategory, str]], fields: Dict[str, Any]) -> Dict[str, Any]:
        if isinstance(category, LogCategory):
            category_name = category.name
        elif category:
            category_name = str(category).upper()
        else:
            category_name = 'GENERAL'
        extra = {'session_id': self.session_id, 'category': category_name}
        for key, value in fields.items():
            if not key.startswith('_'):
                extra[f'field_{key}'] = value
        return extra
    def _log(self, level: int, message: str, category: Optional[Union[LogCategory, str]] = None,
             exception: Optional[BaseException] = None, **kwargs):
        extra = self._build_extra(category, kwargs)
        if exception:
            self.logger.log(level, message, exc_info=(type(exception), exception, exception.__traceback__), extra=extra)
        else:
            self.logger.log(level, message, extra=extra)
    def trace(self, message: str, category: Optional[LogCategory] = None, **kwargs):
        """Log trace message (per-tick detail)."""
        self._log(LogLevel.TRACE.value, message, category, **kwargs)
    def debug(self, message: str, category: Optional[LogCategory] = None, **kwargs):
        """Log debug message."""
        self._log(LogLevel.DEBUG.value, message, category, **kwargs)
    def info(self, message: str, category: Optional[LogCategory] = None, **kwargs):
        """Log info message."""
        self._log(LogLevel.INFO.value, message, category, **kwargs)
    def warning(self, message: str, category: Optional[LogCategory] = None, **kwargs):
        """Log warning message."""
        self._log(LogLevel.WARNING.value, message, category, **kwargs)
    def error(self, message: str, exception: Optional[BaseException] = None,
              category: Optional[LogCategory] = None, **kwargs):
        """Log error message."""
        self._log(LogLevel.ERROR.value, message, category, exception, **kwargs)
    def navigation_event(self, message: str, **kwargs):
        """Log a navigation session event and append it to the navigation journal."""
        self._log(LogLevel.INFO.value, f"NAVIGATION: {message}", LogCategory.NAVIGATION, **kwargs)
        extra = self._build_extra(LogCategory.NAVIGATION, kwargs)
        self.navigation_handler.handle(
            self.logger.makeRecord(self.name, LogLevel.INFO.value, __file__, 0,
                                   f"NAVIGATION: {message}", (), None, extra=extra)
        )
    def log_user_action(self, action: str, details: Optional[Dict[str, Any]] = None):
        """Log control actions issued by the caller (start, stop, replay)."""
        log_data = {
            'action': action,
            'timestamp': time.time()
        }
        if details:
            log_data.update(details)
        self._log(LogLevel.INFO.value, f"USER ACTION: {action}",
                  LogCategory.USER_ACTION, **log_data)
    def log_guidance(self, instruction: str, maneuver: str, distance: float, **kwargs):
        """Log a change of turn-by-turn guidance."""
        self._log(LogLevel.INFO.value, f"GUIDANCE: {maneuver or instruction}",
                  LogCategory.GUIDANCE, instruction=instruction, maneuver=maneuver,
                  distance_m=round(distance, 1), **kwargs)
    @contextmanager
    def timer(self, operation: str, log_result: bool = True):
        """Context manager for timing operations."""
        start_time = time.time()
        operation_id = str(uuid.uuid4())[:8]
        self.debug(f"Starting operation: {operation}",
                   category=LogCategory.SYSTEM, operation_id=operation_id)
        try:
            yield operation_id
        finally:
            duration = time.time() - start_time
            if log_result:
                self.info(f"Completed operation: {operation} in {duration:.3f}s",
                          category=LogCategory.SYSTEM, operation_id=operation_id,
                          duration=duration)
    def flush(self):
        """Flush every handler, including the navigation journal."""
        for handler in self.logger.handlers:
            handler.flush()
        self.navigation_handler.flush()
# Global logger instance
_global_logger: Optional[NavSimLogger] = None
def get_logger() -> NavSimLogger:
    """Get the global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = NavSimLogger()
    return _global_logger
def setup_logger(name: str = "navsim", log_dir: Optional[Path] = None,
                 console_level: int = logging.INFO) -> NavSimLogger:
    """Set up and return the global logger."""
    global _global_logger
    _global_logger = NavSimLogger(name, log_dir, console_level)
    return _global_logger
class LoggableMixin:
    """Mixin class to add logging capabilities to other classes."""
    def __init__(self):
        self._logger = get_logger()
        self._module_name = self.__class__.__name__
    def log_trace(self, message: str, **kwargs):
        """Log trace message."""
        self._logger.trace(f"[{self._module_name}] {message}", **kwargs)
    def log_debug(self, message: str, **kwargs):
        """Log debug message."""
        self._logger.debug(f"[{self._module_name}] {message}", **kwargs)
    def log_warning(self, message: str, **kwargs):
        """Log warning message."""
        self._logger.warning(f"[{self._module_name}] {message}", **kwargs)
    def log_navigation_event(self, message: str, **kwargs):
        """Log navigation session event."""
        self._logger.navigation_event(f"[{self._module_name}] {message}", **kwargs)
    def log_guidance(self, instruction: str, maneuver: str, distance: float, **kwargs):
        """Log guidance change."""
        self._logger.log_guidance(instruction, maneuver, distance,
                                  module=self._module_name, **kwargs)
