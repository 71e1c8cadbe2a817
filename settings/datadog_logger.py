import logging
import os
import json
import requests
import re
from typing import Iterable, Optional

# =========================
# Datadog Configuration
# =========================

# US1 site (correct for https://app.datadoghq.com)
DATADOG_LOG_URL = "https://http-intake.logs.datadoghq.com/v1/input"

# ONLY exclude very noisy internals
EXCLUDED_LOGGERS = {
    "multipart",   # file upload internals
    "httpcore",    # low-level HTTP noise
    "urllib3",     # the handler's own transport
}

# Structured attributes copied from LogRecord extras into the payload
STRUCTURED_FIELDS = (
    "http.method",
    "http.url",
    "http.status_code",
    "http.client_ip",
    "http.client_port",
    "http.request_id",
    "duration_ms",
    "event_type",
    "error.type",
)

# =========================
# Datadog Logging Handler
# =========================

class DatadogLogger(logging.Handler):
    def __init__(
        self,
        service: str,
        api_key: Optional[str],
        env: str = "qa",
        include_loggers: Optional[Iterable[str]] = None,
        url: str = DATADOG_LOG_URL
    ):
        super().__init__()
        self.service = service
        self.api_key = api_key
        self.env = env
        self.url = url
        self.include_loggers = [prefix for prefix in (include_loggers or []) if prefix]

        # Uvicorn already formats access logs; keep the raw message
        self.setFormatter(logging.Formatter("%(message)s"))

        # Format: "IP:PORT - "METHOD PATH HTTP_VERSION" STATUS_CODE"
        self.access_log_pattern = re.compile(
            r'(\d+\.\d+\.\d+\.\d+):(\d+)\s+-\s+"(\w+)\s+([^\s?]+)(?:\?[^"]*)?\s+HTTP/[^"]+"\s+(\d+)'
        )

    def parse_access_log(self, message: str) -> dict:
        """
        Parse uvicorn access log to extract structured fields.
        """
        match = self.access_log_pattern.match(message)
        if not match:
            return {}

        client_ip, client_port, method, path, status_code = match.groups()

        return {
            "http.method": method,
            "http.url": path,
            "http.status_code": int(status_code),
            "http.client_ip": client_ip,
            "http.client_port": int(client_port),
        }

    def should_log(self, record: logging.LogRecord) -> bool:
        logger_name = record.name

        # Allowlist mode (if configured)
        if self.include_loggers:
            return any(logger_name.startswith(prefix) for prefix in self.include_loggers)

        for excluded in EXCLUDED_LOGGERS:
            if logger_name.startswith(excluded):
                return False
        return True

    def build_payload(self, record: logging.LogRecord) -> dict:
        message = self.format(record)
        payload = {
            "message": message,
            "ddsource": "python",
            "service": self.service,
            "hostname": os.getenv("HOSTNAME"),
            "status": record.levelname.lower(),
            "logger": record.name,
        }
        tags = [f"env:{self.env}", f"service:{self.service}"]

        for field in STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        if "http.method" not in payload and record.name == "uvicorn.access":
            payload.update(self.parse_access_log(record.getMessage()))

        if payload.get("http.method"):
            tags.append(f"http.method:{str(payload['http.method']).lower()}")
        if payload.get("http.status_code"):
            tags.append(f"http.status_code:{payload['http.status_code']}")
        if payload.get("event_type"):
            tags.append(f"event_type:{payload['event_type']}")

        payload["ddtags"] = ",".join(tags)
        return payload

    def emit(self, record: logging.LogRecord):
        if not self.api_key or not self.should_log(record):
            return

        try:
            headers = {
                "Content-Type": "application/json",
                "DD-API-KEY": self.api_key,
            }
            requests.post(
                self.url,
                headers=headers,
                data=json.dumps(self.build_payload(record), default=str),
                timeout=2,
            )
        except Exception:
            # Never break the app because of logging
            self.handleError(record)
