"""
Centralized logging service for the newsletter API.
Provides source-tagged logging with request context and JSON details.
"""

import json
import logging
import traceback
from flask import request, has_request_context

LOG_FORMAT = '[newsletter] %(asctime)s %(levelname)s %(name)s: %(message)s'
HANDLER_NAME = 'newsletter'

_log = logging.getLogger('newsletter')


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def configure(app):
        """Attach a stream handler to the package logger at LOG_LEVEL"""
        level = app.config.get('LOG_LEVEL', 'INFO')
        if not any(h.get_name() == HANDLER_NAME for h in _log.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            handler.set_name(HANDLER_NAME)
            _log.addHandler(handler)
        _log.setLevel(level)

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return {}

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        return {
            'ip_address': ip_address,
            'method': request.method,
            'request_path': request.path,
        }

    @staticmethod
    def log(level, source, message, details=None):
        """
        Log a message under the given source.

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (subscribers, bootstrap, ...)
            message (str): Main log message
            details (dict): Additional details, JSON-encoded into the record
        """
        context = LoggingService._get_request_context()
        if details:
            context.update(details)

        line = message
        if context:
            line = f"{message} {json.dumps(context, ensure_ascii=False, default=str)}"

        logging.getLogger(f'newsletter.{source}').log(
            getattr(logging, level.upper(), logging.INFO), line
        )

    @staticmethod
    def debug(source, message, details=None):
        LoggingService.log('DEBUG', source, message, details)

    @staticmethod
    def info(source, message, details=None):
        """Log info message"""
        LoggingService.log('INFO', source, message, details)

    @staticmethod
    def warning(source, message, details=None):
        """Log warning message"""
        LoggingService.log('WARNING', source, message, details)

    @staticmethod
    def error(source, message, details=None):
        """Log error message"""
        LoggingService.log('ERROR', source, message, details)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)


# Convenience instance for easy importing
logger = LoggingService()
