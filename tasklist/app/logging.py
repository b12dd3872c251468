from __future__ import annotations

import json
import logging
from logging.config import dictConfig

# (atrybut rekordu, klucz w obiekcie "http")
HTTP_FIELDS = (
    ("http_method", "method"),
    ("path", "path"),
    ("status_code", "status"),
)

# Klienci Google gadają na INFO przy każdym żądaniu RPC.
QUIET_LOGGERS = ("google", "google.auth", "urllib3", "grpc")

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


### COMMENTS
# ==========================================================
# Logowanie (app/logging.py).
# ==========================================================
# - `plain` dla terminala, `json` dla platformy (jeden obiekt na linię).
# - Pola kontekstu przychodzą przez `extra=`:
#     task_id                        -> z serwisu i warstwy HTTP,
#     http_method / path / status_code -> z handlerów błędów HTTP.
# - uvicorn nie ma własnych handlerów; wszystko idzie przez root.


class JsonFormatter(logging.Formatter):
    """Jedna linia JSON na rekord; kontekst zadania i żądania tylko gdy jest."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        task_id = getattr(record, "task_id", None)
        if task_id is not None:
            payload["task_id"] = task_id

        http_ctx = {}
        for attr, key in HTTP_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                http_ctx[key] = value
        if http_ctx:
            payload["http"] = http_ctx

        if record.exc_info and record.exc_info[0] is not None:
            payload["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stack": self.formatException(record.exc_info),
            }

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "plain") -> None:
    """
    Konfiguruje root logger procesu.

    :param level: Poziom root loggera (np. INFO, DEBUG).
    :param fmt: `plain` albo `json`; inne wartości traktowane jak `plain`.
    """
    formatter_name = "json" if fmt == "json" else "plain"

    loggers: dict[str, dict[str, object]] = {
        name: {"level": "INFO", "handlers": [], "propagate": True}
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
    }
    for name in QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING", "handlers": [], "propagate": True}

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "format": "%(asctime)s %(levelname)-5s %(name)s: %(message)s",
                    "datefmt": DATE_FORMAT,
                },
                "json": {
                    "()": JsonFormatter,
                    "datefmt": DATE_FORMAT,
                },
            },
            "handlers": {
                "stream": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": formatter_name,
                }
            },
            "root": {
                "level": level,
                "handlers": ["stream"],
            },
            "loggers": loggers,
        }
    )
