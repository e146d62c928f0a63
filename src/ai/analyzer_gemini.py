"""Song analyzer backed by the Gemini generateContent REST API.

The photo is sent inline (base64) next to a mode-conditioned instruction and the
model is asked to answer with JSON. Uses a persistent requests.Session so that
concurrent requests in the same worker share pooled connections.
"""

import base64
import logging
from typing import Any

import requests

from src.ai.analyzer_base import BaseSongAnalyzer
from src.ai.contract import extract_json_object, outcome_from_payload
from src.ai.prompts import build_instruction
from src.ai.schema import AnalysisOutcome, AnalysisRequest, ModelCard
from src.core.config import Settings
from src.core.errors import ContractViolation, UpstreamError

logger = logging.getLogger(__name__)


def _candidate_text(data: Any) -> str:
    """Join the text parts of the first candidate. Raises ContractViolation when there is none."""
    if not isinstance(data, dict):
        raise ContractViolation("Analysis service returned an unexpected body", details=type(data).__name__)
    candidates = data.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        feedback = data.get("promptFeedback")
        raise ContractViolation(
            "Analysis service returned no candidates",
            details=str(feedback) if feedback else None,
        )
    first = candidates[0]
    content = first.get("content") if isinstance(first, dict) else None
    if not isinstance(content, dict):
        raise ContractViolation("Analysis service returned a malformed candidate")
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        parts = []
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text.strip():
        raise ContractViolation("Analysis service returned an empty answer")
    return text


class GeminiSongAnalyzer(BaseSongAnalyzer):
    """Analyzer that calls Gemini over HTTPS. One outbound call per analyze()."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self._endpoint = settings.analysis_endpoint.rstrip("/")
        self._model = settings.analysis_model
        self._key = settings.analysis_key
        self._timeout = settings.request_timeout_seconds
        if session is None:
            session = requests.Session()
            adapter = requests.adapters.HTTPAdapter(pool_connections=10, pool_maxsize=20)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self._session = session

    def get_model_card(self) -> ModelCard:
        return ModelCard(name="gemini", version=self._model)

    def _build_payload(self, request: AnalysisRequest) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {"text": build_instruction(request.mode, request.regenerate)},
                        {
                            "inline_data": {
                                "mime_type": request.mime_type,
                                "data": base64.b64encode(request.image_bytes).decode("ascii"),
                            }
                        },
                    ]
                }
            ],
            "generationConfig": {"responseMimeType": "application/json"},
        }

    def _post(self, json_payload: dict[str, Any]) -> Any:
        """POST to generateContent and return the decoded body. Raises UpstreamError on any failure."""
        if not self._key:
            raise UpstreamError("Analysis service key is not configured")
        url = f"{self._endpoint}/models/{self._model}:generateContent"
        try:
            resp = self._session.post(
                url,
                params={"key": self._key},
                json=json_payload,
                timeout=self._timeout,
            )
        except requests.Timeout as e:
            raise UpstreamError("Analysis service timed out", details=str(e)) from e
        except requests.RequestException as e:
            raise UpstreamError("Analysis service is unreachable", details=str(e)) from e
        if not resp.ok:
            raise UpstreamError(
                f"Analysis service returned HTTP {resp.status_code}",
                details=resp.text[:1000] or None,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise ContractViolation("Analysis service returned a non-JSON body", details=resp.text[:500]) from e

    def analyze(self, request: AnalysisRequest) -> AnalysisOutcome:
        logger.debug(
            "Calling %s (mode=%s, regenerate=%s, %d image bytes)",
            self._model,
            request.mode.value,
            request.regenerate.value,
            len(request.image_bytes),
        )
        data = self._post(self._build_payload(request))
        payload = extract_json_object(_candidate_text(data))
        return outcome_from_payload(payload, request.mode)
