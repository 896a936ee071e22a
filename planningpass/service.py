from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from .adapters.llm import ReportTextGenerator
from .adapters.mailer import ConfirmationMailer
from .config import Settings, get_settings
from .report.layout import LayoutPolicy
from .report.renderer import render
from .storage import SubmissionStore
from .types import GeneratedReport, SubmissionRecord
from .validation import validate_questionnaire


logger = logging.getLogger(__name__)


class ReportService:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        generator: ReportTextGenerator | None = None,
        store: SubmissionStore | None = None,
        mailer: ConfirmationMailer | None = None,
    ):
        self.settings = settings or get_settings()
        self.generator = generator or ReportTextGenerator.from_settings(self.settings)
        self.store = store or SubmissionStore(self.settings.data_dir / 'submissions')
        self.mailer = mailer or ConfirmationMailer.from_settings(self.settings)
        self.policy = LayoutPolicy.from_settings(self.settings)

    def render_report(
        self,
        content: str,
        *,
        generated_at: datetime | None = None,
        brand: str | None = None,
    ) -> bytes:
        return render(
            content,
            policy=self.policy,
            generated_at=generated_at,
            brand=brand or self.settings.report_brand,
        )

    def generate_report(self, data: Any) -> GeneratedReport:
        questionnaire = validate_questionnaire(data)
        content = self.generator.generate_sync(questionnaire)
        pdf = self.render_report(content)
        return GeneratedReport(content=content, pdf=pdf)

    def submit_form(self, data: Any) -> SubmissionRecord:
        record = self.store.save(data)
        # The stored submission stands regardless of mail delivery.
        try:
            self.mailer.notify(data if isinstance(data, Mapping) else {})
        except Exception:
            logger.exception('Confirmation dispatch failed for submission %s', record.id)
        return record

    def send_test_email(self) -> str:
        return self.mailer.send_test_email()
