"""
Failure-reason suggestions.

Asks the Gemini generateContent REST API for a one-sentence reason a
checkpoint might have failed. Any problem (no key, network, bad JSON, empty
answer) degrades to the fixed fallback string so the reason field is never
left empty.
"""
import json
import logging
from typing import Optional

import httpx
from django.conf import settings

from qc.errors import SuggestionServiceUnavailable

logger = logging.getLogger(__name__)

PROMPT = (
    'The following factory QC checkpoint failed during the {stage} stage: "{label}". '
    "Provide a concise, professional, 1-sentence reason why this might have failed for a quality report."
)


class SuggestionClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = settings.QC_SUGGESTION_API_KEY if api_key is None else api_key
        self.model = model or settings.QC_SUGGESTION_MODEL
        self.url = (url or settings.QC_SUGGESTION_URL).format(model=self.model)
        self.client = client

    def _payload(self, label: str, stage: str) -> dict:
        return {
            "contents": [{"parts": [{"text": PROMPT.format(label=label, stage=stage)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": {
                    "type": "OBJECT",
                    "properties": {"reason": {"type": "STRING"}},
                    "required": ["reason"],
                },
            },
        }

    def _post(self, payload: dict) -> dict:
        params = {"key": self.api_key}
        if self.client is not None:
            resp = self.client.post(self.url, params=params, json=payload)
        else:
            with httpx.Client() as client:
                resp = client.post(self.url, params=params, json=payload)
        resp.raise_for_status()
        return resp.json()

    def request_reason(self, label: str, stage: str) -> str:
        """Raises SuggestionServiceUnavailable on any failure."""
        if not self.api_key:
            raise SuggestionServiceUnavailable("No suggestion API key configured.")
        try:
            data = self._post(self._payload(label, stage))
            text = data["candidates"][0]["content"]["parts"][0]["text"]
            reason = (json.loads(text).get("reason") or "").strip()
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
            raise SuggestionServiceUnavailable(str(exc)) from exc
        if not reason:
            raise SuggestionServiceUnavailable("Empty suggestion.")
        return reason

    def suggest(self, label: str, stage: str) -> str:
        try:
            return self.request_reason(label, stage)
        except SuggestionServiceUnavailable:
            logger.exception("Suggestion failed for %r (%s); using fallback", label, stage)
            return settings.QC_SUGGESTION_FALLBACK


def suggest_failure_reason(label, stage, client=None):
    return (client or SuggestionClient()).suggest(label, stage or "General")
