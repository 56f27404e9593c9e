"""
Logging configuration for the Diploma Registry.

Provides structured JSON logging for audit trails and debugging.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import List, Optional

# Context variable for request ID tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    One JSON object per line, suitable for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = get_request_id()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class AuditLogger:
    """
    Logger for registry audit events.

    Every command outcome, accepted or rejected, is logged here.
    """

    def __init__(self, name: str = "diploma_registry.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        extra = {
            "event_type": event_type,
            "request_id": get_request_id(),
            **kwargs
        }

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {kwargs.get('message', '')}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def diploma_issued(
        self,
        diploma_id: int,
        issuer: str,
        content_hash: str,
        block_height: int
    ) -> None:
        self._log(
            logging.INFO,
            "DIPLOMA_ISSUED",
            diploma_id=diploma_id,
            issuer=issuer,
            content_hash=content_hash,
            block_height=block_height,
            message=f"Diploma {diploma_id} issued by {issuer}"
        )

    def issuance_rejected(
        self,
        caller: str,
        error_code: int,
        gate_id: str,
        observed: Optional[str] = None
    ) -> None:
        self._log(
            logging.WARNING,
            "ISSUANCE_REJECTED",
            caller=caller,
            error_code=error_code,
            gate_id=gate_id,
            observed=observed,
            message=f"Issuance rejected at {gate_id} ({error_code})"
        )

    def fee_transfer(
        self,
        amount: int,
        sender: str,
        recipient: str
    ) -> None:
        self._log(
            logging.INFO,
            "FEE_TRANSFER",
            amount=amount,
            sender=sender,
            recipient=recipient,
            message=f"Issuance fee {amount} from {sender} to {recipient}"
        )

    def diploma_updated(
        self,
        diploma_id: int,
        updater: str,
        gpa: int,
        block_height: int
    ) -> None:
        self._log(
            logging.INFO,
            "DIPLOMA_UPDATED",
            diploma_id=diploma_id,
            updater=updater,
            gpa=gpa,
            block_height=block_height,
            message=f"Diploma {diploma_id} updated by {updater}"
        )

    def update_rejected(
        self,
        diploma_id: int,
        caller: str,
        reason: str
    ) -> None:
        # The reason is logged only; callers see a bare failure.
        self._log(
            logging.WARNING,
            "UPDATE_REJECTED",
            diploma_id=diploma_id,
            caller=caller,
            reason=reason,
            message=f"Update of diploma {diploma_id} rejected: {reason}"
        )

    def authority_contract_set(self, identity: str) -> None:
        self._log(
            logging.INFO,
            "AUTHORITY_CONTRACT_SET",
            identity=identity,
            message=f"Authority contract set to {identity}"
        )

    def authority_contract_rejected(self, identity: str, reason: str) -> None:
        self._log(
            logging.WARNING,
            "AUTHORITY_CONTRACT_REJECTED",
            identity=identity,
            reason=reason,
            message=f"Authority contract {identity} rejected: {reason}"
        )

    def issuance_fee_set(self, old_fee: int, new_fee: int) -> None:
        self._log(
            logging.INFO,
            "ISSUANCE_FEE_SET",
            old_fee=old_fee,
            new_fee=new_fee,
            message=f"Issuance fee changed from {old_fee} to {new_fee}"
        )

    def issuance_fee_rejected(self, new_fee: int) -> None:
        self._log(
            logging.WARNING,
            "ISSUANCE_FEE_REJECTED",
            new_fee=new_fee,
            message="Issuance fee change rejected: authority contract not set"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting (recommended for production)
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set the request ID for the current context.

    Args:
        request_id: Request ID to set, or None to generate one

    Returns:
        The request ID that was set
    """
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


# Global audit logger instance
audit_log = AuditLogger()
