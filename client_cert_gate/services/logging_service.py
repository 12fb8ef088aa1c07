"""
Logging and rejection tracking for the client certificate gate.
"""
import json
import logging
import logging.handlers
import sys
import threading
import traceback
from collections import deque
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Any, Optional, List


@dataclass
class LogEntry:
    """Structured log entry for JSON logging."""
    timestamp: str
    level: str
    logger_name: str
    message: str
    module: str
    function: str
    line_number: int
    thread_id: int
    process_id: int
    extra_data: Optional[Dict[str, Any]] = None
    exception_info: Optional[Dict[str, Any]] = None


@dataclass
class RejectionMetric:
    """A single rejected request."""
    reason: str
    status_code: int
    timestamp: str
    common_name: Optional[str] = None
    error_message: Optional[str] = None


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = LogEntry(
            timestamp=datetime.fromtimestamp(record.created).isoformat(),
            level=record.levelname,
            logger_name=record.name,
            message=record.getMessage(),
            module=record.module,
            function=record.funcName,
            line_number=record.lineno,
            thread_id=record.thread,
            process_id=record.process,
            extra_data=getattr(record, 'extra_data', None)
        )

        if record.exc_info:
            log_entry.exception_info = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': traceback.format_exception(*record.exc_info)
            }

        return json.dumps(asdict(log_entry), default=str)


DEFAULT_MAX_REJECTIONS = 1000


class RejectionTracker:
    """Thread-safe record of the most recent rejected requests."""

    def __init__(self, max_rejections: int = DEFAULT_MAX_REJECTIONS):
        if max_rejections <= 0:
            raise ValueError("max_rejections must be a positive integer")
        # Oldest records fall off once the bound is reached
        self.rejections: deque = deque(maxlen=max_rejections)
        self.lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def track_rejection(self, reason: str, status_code: int,
                        common_name: Optional[str] = None,
                        error_message: Optional[str] = None):
        """Record a rejected request."""
        metric = RejectionMetric(
            reason=reason,
            status_code=status_code,
            timestamp=datetime.now().isoformat(),
            common_name=common_name,
            error_message=error_message
        )

        with self.lock:
            self.rejections.append(metric)

    def get_rejections(self, reason: Optional[str] = None,
                       since: Optional[datetime] = None) -> List[RejectionMetric]:
        """Get rejections with optional filtering."""
        with self.lock:
            filtered = list(self.rejections)

        if reason:
            filtered = [r for r in filtered if r.reason == reason]

        if since:
            since_iso = since.isoformat()
            filtered = [r for r in filtered if r.timestamp >= since_iso]

        return filtered

    def get_rejection_summary(self, since: Optional[datetime] = None) -> Dict[str, Any]:
        """Get rejection counts grouped by reason."""
        rejections = self.get_rejections(since=since)

        if not rejections:
            return {'total_rejections': 0, 'reasons': {}}

        reasons = {}
        for rejection in rejections:
            reasons[rejection.reason] = reasons.get(rejection.reason, 0) + 1

        return {
            'total_rejections': len(rejections),
            'reasons': reasons,
            'most_common_reason': max(reasons.items(), key=lambda x: x[1])[0]
        }

    def cleanup_old_rejections(self, max_age_hours: int = 24):
        """Remove rejections older than specified hours."""
        cutoff_iso = (datetime.now() - timedelta(hours=max_age_hours)).isoformat()

        with self.lock:
            while self.rejections and self.rejections[0].timestamp < cutoff_iso:
                self.rejections.popleft()


class LoggingService:
    """Logging setup plus rejection tracking for the gate."""

    def __init__(self, config, configure_handlers: bool = True,
                 max_rejections: int = DEFAULT_MAX_REJECTIONS):
        """Initialize logging service with configuration."""
        self.config = config
        self.rejection_tracker = RejectionTracker(max_rejections)
        if configure_handlers:
            self._setup_logging()
        self.logger = logging.getLogger(__name__)
        self.logger.info("Logging service initialized")

    def _setup_logging(self):
        """Configure console, JSON file and error file handlers on the root logger."""
        log_dir = Path(self.config.log_file_path).parent
        log_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        root_logger.setLevel(log_level)

        json_formatter = JSONFormatter()
        console_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        file_handler = logging.handlers.RotatingFileHandler(
            filename=self.config.log_file_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(json_formatter)
        file_handler.setLevel(log_level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(log_level)

        error_log_path = str(Path(self.config.log_file_path).with_suffix('.errors.log'))
        error_handler = logging.handlers.RotatingFileHandler(
            filename=error_log_path,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setFormatter(json_formatter)
        error_handler.setLevel(logging.ERROR)

        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)
        root_logger.addHandler(error_handler)

    def track_rejection(self, reason: str, status_code: int,
                        common_name: Optional[str] = None,
                        error_message: Optional[str] = None):
        """Record a rejected request."""
        self.rejection_tracker.track_rejection(reason, status_code, common_name, error_message)

    def get_rejection_summary(self, since_hours: int = 24) -> Dict[str, Any]:
        """Get rejection summary for the specified time period."""
        since = datetime.now() - timedelta(hours=since_hours)
        return self.rejection_tracker.get_rejection_summary(since=since)

    def get_health_status(self) -> Dict[str, Any]:
        """Get overall health status of the logging system."""
        try:
            summary = self.get_rejection_summary(since_hours=1)
            return {
                'status': 'healthy',
                'recent_rejections': summary.get('total_rejections', 0),
                'timestamp': datetime.now().isoformat()
            }
        except Exception as e:
            return {
                'status': 'unhealthy',
                'error': str(e),
                'timestamp': datetime.now().isoformat()
            }
