import logging
import logging.handlers
import os
import sys
import json
import threading
from typing import Optional, Dict, Any
from enum import Enum
from datetime import datetime

class LogLevel(Enum):
    """Log levels enumeration"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

class LogFormat(Enum):
    """Log format types"""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"

class StructuredFormatter(logging.Formatter):
    """Structured log formatter"""

    def __init__(self, fmt_type: LogFormat = LogFormat.DETAILED, include_context: bool = True):
        self.fmt_type = fmt_type
        self.include_context = include_context
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        structured_data = getattr(record, 'structured_data', {})

        if self.fmt_type == LogFormat.JSON:
            return self._format_json(record, structured_data)
        elif self.fmt_type == LogFormat.SIMPLE:
            return f"{record.levelname}: {record.getMessage()}"
        else:
            return self._format_text(record, structured_data)

    def _format_json(self, record: logging.LogRecord, structured_data: Dict) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if structured_data:
            log_entry["data"] = structured_data

        return json.dumps(log_entry, default=str)

    def _format_text(self, record: logging.LogRecord, structured_data: Dict) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]

        base_msg = f"{timestamp} | {record.levelname:8} | {record.name} | {record.getMessage()}"

        if self.include_context and structured_data:
            base_msg += f" | {json.dumps(structured_data, default=str)}"

        if record.exc_info:
            base_msg += f"\n{self.formatException(record.exc_info)}"

        return base_msg

class SensitiveDataFilter(logging.Filter):
    """Filter to mask sensitive data (seeds, keys) in logs"""

    def __init__(self):
        super().__init__()
        self.sensitive_patterns = set()
        self.masking_enabled = True

    def add_sensitive_pattern(self, pattern: str):
        if pattern and len(pattern) > 4:
            self.sensitive_patterns.add(pattern)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.masking_enabled or not self.sensitive_patterns:
            return True

        if isinstance(record.msg, str):
            record.msg = self._mask_data(record.msg)

        if hasattr(record, 'structured_data'):
            record.structured_data = self._mask_structured_data(record.structured_data)

        if record.args:
            if isinstance(record.args, dict):
                record.args = self._mask_structured_data(record.args)
            else:
                record.args = tuple(self._mask_data(arg) if isinstance(arg, str) else arg
                                    for arg in record.args)

        return True

    def _mask_data(self, text: str) -> str:
        masked_text = text
        for pattern in self.sensitive_patterns:
            if pattern in masked_text:
                masked = pattern[:4] + '*' * (len(pattern) - 4)
                masked_text = masked_text.replace(pattern, masked)
        return masked_text

    def _mask_structured_data(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: self._mask_structured_data(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [self._mask_structured_data(item) for item in data]
        elif isinstance(data, str):
            return self._mask_data(data)
        else:
            return data

class LogManager:
    """Process-wide logging setup for applications embedding uba_wallet"""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.initialized = False
        self.sensitive_filter = SensitiveDataFilter()
        self.config = {
            'log_level': LogLevel.INFO,
            'log_format': LogFormat.DETAILED,
            'max_file_size': 10 * 1024 * 1024,
            'backup_count': 5,
            'enable_console': True,
            'log_file': None,
        }

        self._initialized = True

    def configure(self, config: Dict[str, Any]) -> None:
        """Configure logging; string values for level/format are accepted"""
        config = dict(config)
        if isinstance(config.get('log_level'), str):
            config['log_level'] = LogLevel(config['log_level'].upper())
        if isinstance(config.get('log_format'), str):
            config['log_format'] = LogFormat(config['log_format'].lower())
        self.config.update(config)
        self._setup_logging_system()

    def _setup_logging_system(self) -> None:
        root = logging.getLogger("uba_wallet")
        for handler in list(root.handlers):
            root.removeHandler(handler)

        root.setLevel(getattr(logging, self.config['log_level'].value))
        formatter = StructuredFormatter(self.config['log_format'])

        if self.config['enable_console']:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            console_handler.addFilter(self.sensitive_filter)
            root.addHandler(console_handler)

        if self.config.get('log_file'):
            file_handler = self._create_file_handler()
            file_handler.setFormatter(formatter)
            file_handler.addFilter(self.sensitive_filter)
            root.addHandler(file_handler)

        # websockets is chatty at DEBUG
        logging.getLogger("websockets").setLevel(logging.WARNING)

        self.initialized = True

    def _create_file_handler(self) -> logging.Handler:
        log_file = self.config['log_file']
        log_dir = os.path.dirname(log_file)

        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        return logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=self.config['max_file_size'],
            backupCount=self.config['backup_count'],
            encoding='utf-8'
        )

class UbaLogger:
    """Logger wrapper that attaches keyword context as structured data"""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)
        self.sensitive_filter = LogManager().sensitive_filter
        self.logger.addFilter(self.sensitive_filter)

    def add_sensitive_data(self, data: Optional[str]) -> None:
        if data:
            self.sensitive_filter.add_sensitive_pattern(data)

    def _log_with_structure(self, level: int, msg: str, **kwargs) -> None:
        self.logger.log(level, msg, extra={'structured_data': kwargs}, stacklevel=3)

    def debug(self, msg: str, **kwargs) -> None:
        self._log_with_structure(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs) -> None:
        self._log_with_structure(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs) -> None:
        self._log_with_structure(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, **kwargs) -> None:
        self._log_with_structure(logging.ERROR, msg, **kwargs)

def configure_logging(**config) -> LogManager:
    manager = LogManager()
    manager.configure(config)
    return manager

logger = UbaLogger("uba_wallet")
