import logging
import uuid
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from contextvars import ContextVar

# Context variable to store request_id for the current task/request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        # Inject correlation ID if available
        req_id = request_id_var.get()
        if req_id:
            log_record["request_id"] = req_id

        if not log_record.get("timestamp"):
            from datetime import datetime, timezone
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        if log_record.get("level"):
            log_record["level"] = log_record["level"].upper()
        else:
            log_record["level"] = record.levelname

def new_request_id(incoming: Optional[str] = None) -> str:
    """Bind a correlation id for the current context and return it."""
    req_id = incoming or uuid.uuid4().hex
    request_id_var.set(req_id)
    return req_id

def setup_logging(level: str = "INFO"):
    logger = logging.getLogger()
    # Idempotent: uvicorn reloads and test sessions call this more than once
    if not any(isinstance(h.formatter, CustomJsonFormatter) for h in logger.handlers):
        log_handler = logging.StreamHandler()
        formatter = CustomJsonFormatter("%(timestamp) %(level) %(name) %(message)")
        log_handler.setFormatter(formatter)
        logger.addHandler(log_handler)
    logger.setLevel(level.upper())

    # Suppress verbose logs from some libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
