"""
Configuration for the issue tracker dashboard
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

SHEETS_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv&sheet={sheet_name}"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _split_origins(value: str) -> List[str]:
    return [o.strip() for o in value.split(",") if o.strip()]


@dataclass
class SourceConfig:
    """Where the issue sheet is read from.

    Precedence: local CSV path, explicit CSV URL, then sheet id + sheet name.
    """
    sheet_id: str = os.getenv("ISSUES_SHEET_ID", "")
    sheet_name: str = os.getenv("ISSUES_SHEET_NAME", "Sheet1")
    csv_url: str = os.getenv("ISSUES_CSV_URL", "")
    csv_path: str = os.getenv("ISSUES_CSV_PATH", "")
    fetch_timeout: float = float(os.getenv("ISSUES_FETCH_TIMEOUT", "15"))

    def export_url(self) -> Optional[str]:
        if self.csv_url:
            return self.csv_url
        if self.sheet_id:
            return SHEETS_EXPORT_URL.format(sheet_id=self.sheet_id, sheet_name=self.sheet_name)
        return None


@dataclass
class DashboardConfig:
    refresh_seconds: int = int(os.getenv("ISSUES_REFRESH_SECONDS", "300"))
    unresolved_days: int = int(os.getenv("ISSUES_UNRESOLVED_DAYS", "20"))
    log_level: str = os.getenv("ISSUES_LOG_LEVEL", "INFO")
    cors_origins: List[str] = field(
        default_factory=lambda: _split_origins(
            os.getenv("ISSUES_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
        )
    )


@dataclass
class Config:
    source: SourceConfig = field(default_factory=SourceConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)


_logging_configured = False


def configure_logging(level: str = "INFO") -> None:
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    _logging_configured = True


def get_config() -> Config:
    return Config()
