"""
Structured logging utilities for the translator client.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from mstranslator.config.config import config


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, 'service', 'mstranslator'),
            "event": getattr(record, 'event', None) or record.funcName,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if getattr(record, 'metrics', None):
            log_entry["metrics"] = record.metrics

        if getattr(record, 'metadata', None):
            log_entry["metadata"] = record.metadata

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TranslatorLogger:
    """Logger wrapper emitting structured records for the translator client."""

    def __init__(self, name: str, service: str = "mstranslator"):
        self.logger = logging.getLogger(name)
        self.service = service
        self._setup_logger()

    def _setup_logger(self):
        """Configure logger with structured formatting."""
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(getattr(logging, config.monitoring.log_level, logging.INFO))

    def _extra(self, event: Optional[str], metrics: Optional[Dict[str, Any]],
               metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            'service': self.service,
            'event': event,
            'metrics': metrics,
            'metadata': metadata
        }

    def info(self, message: str, event: Optional[str] = None,
             metrics: Optional[Dict[str, Any]] = None,
             metadata: Optional[Dict[str, Any]] = None):
        """Log info level message with structured data."""
        self.logger.info(message, extra=self._extra(event, metrics, metadata))

    def warning(self, message: str, event: Optional[str] = None,
                metrics: Optional[Dict[str, Any]] = None,
                metadata: Optional[Dict[str, Any]] = None, exc_info: bool = False):
        """Log warning level message with structured data."""
        self.logger.warning(message, extra=self._extra(event, metrics, metadata), exc_info=exc_info)

    def error(self, message: str, event: Optional[str] = None,
              metrics: Optional[Dict[str, Any]] = None,
              metadata: Optional[Dict[str, Any]] = None, exc_info: bool = False):
        """Log error level message with structured data."""
        self.logger.error(message, extra=self._extra(event, metrics, metadata), exc_info=exc_info)

    def debug(self, message: str, event: Optional[str] = None,
              metrics: Optional[Dict[str, Any]] = None,
              metadata: Optional[Dict[str, Any]] = None):
        """Log debug level message with structured data."""
        self.logger.debug(message, extra=self._extra(event, metrics, metadata))

    def token_acquired(self, scope: str, token_type: str, expires_in_seconds: int, deadline: datetime):
        """Log a successful credential exchange. The token value is never logged."""
        self.info(
            "Access token acquired",
            event="token_acquired",
            metrics={
                "expires_in_seconds": expires_in_seconds
            },
            metadata={
                "scope": scope,
                "token_type": token_type,
                "deadline": deadline.isoformat()
            }
        )

    def cache_write_failed(self, cache_key: str, target_lang: str, error_message: str):
        """Log a cache write that was dropped while the result was still returned."""
        self.warning(
            f"Cache write failed: {error_message}",
            event="cache_write_failed",
            metadata={
                "cache_key": cache_key[:32],
                "target_language": target_lang,
                "error_message": error_message
            }
        )

    def batch_reconciled(self, source_lang: str, target_lang: str, total: int,
                         hits: int, sent: int, cache_enabled: bool):
        """Log the outcome of one batch cache reconciliation."""
        self.info(
            "Batch translation reconciled",
            event="batch_reconciled",
            metrics={
                "total_texts": total,
                "cache_hits": hits,
                "texts_sent": sent,
                "duplicates_collapsed": total - hits - sent
            },
            metadata={
                "source_language": source_lang,
                "target_language": target_lang,
                "cache_enabled": cache_enabled
            }
        )


# Global logger instances
auth_logger = TranslatorLogger("auth", "token-manager")
translation_logger = TranslatorLogger("translation", "translation-service")
cache_logger = TranslatorLogger("cache", "translation-cache")
provider_logger = TranslatorLogger("provider", "translation-provider")
