"""
Logging Configuration

Console, rotating file and JSON handlers for the cart engine, plus structlog
routed through the stdlib logging tree.
"""

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import structlog
from pythonjsonlogger.json import JsonFormatter

from reconshop_cart.config import Settings


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for console output"""

    colors = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        # Color a copy so other handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        log_color = self.colors.get(record.levelname, self.colors['RESET'])
        record.levelname = f"{log_color}{record.levelname}{self.colors['RESET']}"
        return super().format(record)


class CartJsonFormatter(JsonFormatter):
    """JSON formatter with cart-specific fields"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["process_id"] = os.getpid()

        if hasattr(record, "operation"):
            log_record["operation"] = record.operation

        if hasattr(record, "storage_key"):
            log_record["storage_key"] = record.storage_key


@dataclass
class LoggingConfigOptions:
    """Dataclass for logging configuration options"""
    log_level: str = "INFO"
    log_dir: str = "logs"
    enable_console: bool = True
    enable_file: bool = True
    enable_json: bool = True
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

    @classmethod
    def from_settings(cls, settings: Settings) -> "LoggingConfigOptions":
        """Build options from application settings"""
        return cls(
            log_level=settings.log_level,
            log_dir=settings.log_dir,
            enable_console=settings.environment != "production",
        )


class LoggingConfig:
    """Logging configuration"""

    def __init__(self, options: LoggingConfigOptions):
        self.options = options

        if self.options.enable_file or self.options.enable_json:
            Path(self.options.log_dir).mkdir(parents=True, exist_ok=True)

        self._configure_structlog()

    def __repr__(self):
        return f"LoggingConfig(options={self.options})"

    def _configure_structlog(self):
        """Configure structlog to hand events to stdlib logging"""
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer()
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def setup_logging(self):
        """Setup root logger handlers"""

        level = getattr(logging, self.options.log_level.upper())
        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        # Clear existing handlers
        root_logger.handlers.clear()

        plain_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        if self.options.enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(ColoredFormatter(
                fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            root_logger.addHandler(console_handler)

        if self.options.enable_file:
            app_handler = logging.handlers.RotatingFileHandler(
                Path(self.options.log_dir) / 'reconshop_cart.log',
                maxBytes=self.options.max_file_size,
                backupCount=self.options.backup_count,
                encoding="utf-8",
            )
            app_handler.setLevel(level)
            app_handler.setFormatter(plain_formatter)
            root_logger.addHandler(app_handler)

            # Error-only log
            error_handler = logging.handlers.RotatingFileHandler(
                Path(self.options.log_dir) / 'errors.log',
                maxBytes=self.options.max_file_size,
                backupCount=self.options.backup_count,
                encoding="utf-8",
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(plain_formatter)
            root_logger.addHandler(error_handler)

        if self.options.enable_json:
            json_handler = logging.handlers.RotatingFileHandler(
                Path(self.options.log_dir) / 'reconshop_cart.json.log',
                maxBytes=self.options.max_file_size,
                backupCount=self.options.backup_count,
                encoding="utf-8",
            )
            json_handler.setLevel(level)
            json_handler.setFormatter(CartJsonFormatter())
            root_logger.addHandler(json_handler)

        logging.getLogger('sqlalchemy').setLevel(logging.WARNING)

        logger = logging.getLogger(__name__)
        logger.info(
            "Logging configured - Level: %s, Console: %s, File: %s, JSON: %s",
            self.options.log_level,
            self.options.enable_console,
            self.options.enable_file,
            self.options.enable_json
        )


def setup_logging(options: LoggingConfigOptions):
    """Setup logging using the LoggingConfig class"""
    config = LoggingConfig(options)
    config.setup_logging()


def get_structured_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)
