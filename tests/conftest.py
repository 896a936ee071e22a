from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from planningpass.adapters.mailer import ConfirmationMailer, MailerConfig
from planningpass.config import get_settings

FIXED_TIME = datetime(2026, 1, 2, 3, 4, 5)

SAMPLE_REPORT = """📅 Generated on: 2 January 2026
🏡 Property Address: 1 Main St
🏛 Postcode: AB1 2CD

Project Summary
Property Type: Semi-detached
Project Type: Rear extension

Item Tested | Proposal | Standard | Result
Depth | 3m | 3m max | ✅
Height | 4.5m | 4m max | ❌

Must-Do Checklist
• Confirm boundary positions
• Notify neighbours

Disclaimer
This report is based solely on the information you provided."""

VALID_PAYLOAD: dict[str, Any] = {
    'homeType': 'Semi-detached',
    'projectType': 'Rear extension',
    'sketch': {'depth': 3, 'height': 4.5},
    'designatedAreas': {'conservationArea': True, 'nationalPark': False},
    'address': '1 Main St',
    'postcode': 'AB1 2CD',
    'name': 'Sam Taylor',
    'email': 'sam@example.com',
    'phone': '01234 567890',
}

_ENV_KEYS = (
    'GEMINI_API_KEY',
    'OPENAI_API_KEY',
    'LLM_API_KEY',
    'LLM_BASE_URL',
    'OPENAI_BASE_URL',
    'EMAIL_USER',
    'EMAIL_PASS',
    'PORT',
    'SERVER_PORT',
    'DATA_DIR',
    'REPORT_BRAND',
)


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # Keep any developer .env out of the test run.
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('DATA_DIR', str(tmp_path / 'data'))
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def smtp() -> MagicMock:
    connection = MagicMock()
    connection.__enter__.return_value = connection
    return connection


@pytest.fixture
def mailer(smtp: MagicMock) -> ConfirmationMailer:
    factory = MagicMock(return_value=smtp)
    return ConfirmationMailer(
        MailerConfig(host='smtp.test', port=465, user='sender@example.com', password='secret'),
        smtp_factory=factory,
    )
