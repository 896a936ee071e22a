from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from openai import AsyncOpenAI, OpenAIError

from planningpass.config import Settings
from planningpass.errors import UpstreamGenerationError
from planningpass.prompts.report_prompt import build_report_prompt


logger = logging.getLogger(__name__)


@dataclass
class BasicLLMConfig:
    base_url: str | None
    api_key: str | None
    model: str
    timeout_seconds: int
    temperature: float = 0.4
    max_tokens: int = 4096


class BasicLLMClient:
    """Minimal async OpenAI-compatible client helper."""

    def __init__(self, cfg: BasicLLMConfig):
        self.cfg = cfg

    @property
    def configured(self) -> bool:
        return bool(self.cfg.api_key)

    def open(self) -> AsyncOpenAI:
        if not self.configured:
            raise RuntimeError('LLM client is not configured')
        # A fresh client per call; sync callers run each request on its own event loop.
        return AsyncOpenAI(
            api_key=self.cfg.api_key,
            base_url=self.cfg.base_url,
            timeout=httpx.Timeout(max(30, int(self.cfg.timeout_seconds)), connect=10.0),
            max_retries=0,
        )


class ReportTextGenerator:
    def __init__(self, llm: BasicLLMClient):
        self.llm = llm

    @classmethod
    def from_settings(cls, settings: Settings) -> ReportTextGenerator:
        return cls(
            BasicLLMClient(
                BasicLLMConfig(
                    base_url=settings.llm_base_url,
                    api_key=settings.llm_api_key,
                    model=settings.report_model,
                    timeout_seconds=settings.llm_timeout_seconds,
                    temperature=settings.report_temperature,
                    max_tokens=settings.report_max_tokens,
                )
            )
        )

    async def generate(self, data: Mapping[str, Any]) -> str:
        if not self.llm.configured:
            raise UpstreamGenerationError('Report text source is not configured')

        prompt = build_report_prompt(data)
        logger.info('Requesting report text from %s', self.llm.cfg.model)
        try:
            async with self.llm.open() as client:
                response = await client.chat.completions.create(
                    model=self.llm.cfg.model,
                    messages=[{'role': 'user', 'content': prompt}],
                    temperature=self.llm.cfg.temperature,
                    max_tokens=self.llm.cfg.max_tokens,
                )
        except (OpenAIError, httpx.HTTPError) as exc:
            raise UpstreamGenerationError(f'Report generation failed: {exc}') from exc

        text = ''
        choices = getattr(response, 'choices', None) or []
        if choices:
            text = str(getattr(choices[0].message, 'content', '') or '')
        if not text.strip():
            raise UpstreamGenerationError('Report text source returned no content')
        logger.info('Received report text: %s chars', len(text))
        return text

    def generate_sync(self, data: Mapping[str, Any]) -> str:
        return asyncio.run(self.generate(data))
