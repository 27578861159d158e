"""
Conversational backend client (Voiceflow runtime API).

Sends one user turn per call and collects the text carried by the
returned traces. A failed call is surfaced as BackendFailure and is never
retried.
"""

from typing import Any, Dict, List, Literal, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from relay_service.errors import BackendFailure
from relay_service.infrastructure.extraction_log import safe_short
from relay_service.infrastructure.logging import RelayLogger

TRUNCATION_MARKER = "\n…[truncated]"
DEFAULT_MAX_TEXT = 6000
DEFAULT_TIMEOUT = 200

NO_TEXT_REPLY = (
    "Я получил данные, но ИИ не вернул текстовый ответ. "
    "Проверьте, есть ли в сценарии текстовые ответы."
)


# ============================================
# Trace models
# ============================================

class TracePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: Optional[str] = None


class TextTrace(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["text"]
    payload: TracePayload


class SpeakTrace(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["speak"]
    payload: TracePayload


class MessageTrace(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["message"]
    payload: TracePayload


class UnknownTrace(BaseModel):
    """Any trace this relay does not render (choices, debug, end, ...)."""
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None


Trace = Union[TextTrace, SpeakTrace, MessageTrace, UnknownTrace]

TEXT_TRACE_TYPES = {
    "text": TextTrace,
    "speak": SpeakTrace,
    "message": MessageTrace,
}


def parse_trace(raw: Any) -> Trace:
    """
    Parse one raw trace object.

    Unknown types and malformed recognized traces become UnknownTrace
    instead of raising.
    """
    if not isinstance(raw, dict):
        return UnknownTrace()

    model = TEXT_TRACE_TYPES.get(raw.get("type"))
    if model is None:
        return UnknownTrace.model_validate(raw)
    try:
        return model.model_validate(raw)
    except ValidationError:
        return UnknownTrace(type=str(raw.get("type")))


def parse_traces(raw: Any) -> List[Trace]:
    if not isinstance(raw, list):
        return []
    return [parse_trace(item) for item in raw]


def collect_messages(traces: List[Trace]) -> List[str]:
    """Collect non-empty messages from text-bearing traces, in arrival order."""
    messages = []
    for trace in traces:
        if isinstance(trace, (TextTrace, SpeakTrace, MessageTrace)) and trace.payload.message:
            messages.append(trace.payload.message)
    return messages


def truncate(text: Optional[str], max_len: int = DEFAULT_MAX_TEXT, marker: str = TRUNCATION_MARKER) -> str:
    """
    Cut text to max_len characters, appending marker when cut.

    Args:
        text: Text to send (None is treated as empty)
        max_len: Maximum number of characters kept
        marker: Suffix appended to cut text

    Returns:
        str: Text of at most max_len + len(marker) characters
    """
    if not text:
        return ""
    return text[:max_len] + marker if len(text) > max_len else text


class ConversationRelay:
    """Forward user turns to the backend and return its reply text."""

    def __init__(
        self,
        api_key: str,
        version_id: str,
        base_url: str = "https://general-runtime.voiceflow.com",
        max_text: int = DEFAULT_MAX_TEXT,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        monitor=None,
        log: Optional[RelayLogger] = None,
    ):
        self.api_key = api_key
        self.version_id = version_id
        self.base_url = base_url.rstrip("/")
        self.max_text = max_text
        self.timeout = timeout
        self.session = session or requests.Session()
        self.monitor = monitor
        self.log = log or RelayLogger(component="Backend")

    def interact_url(self, user_id: str) -> str:
        return f"{self.base_url}/state/{self.version_id}/user/{user_id}/interact"

    def build_request(self, text: str) -> Dict[str, Any]:
        return {"request": {"type": "text", "payload": truncate(text, self.max_text)}}

    def _record(self, status: str) -> None:
        if self.monitor is not None:
            self.monitor.log_request("voiceflow", "interact", status)

    def relay(self, user_id: str, text: str) -> str:
        """
        Send one user turn and return the backend's reply.

        Args:
            user_id: Stable chat participant identifier
            text: Typed or extracted text

        Returns:
            str: Recognized trace messages joined by newlines, or a fixed notice if there are none

        Raises:
            BackendFailure: On HTTP errors, timeouts or a non-JSON body
        """
        body = self.build_request(text)
        payload = body["request"]["payload"]
        self.log.debug("Sending %d chars: %s", len(payload), safe_short(payload, 500))

        try:
            res = self.session.post(
                self.interact_url(user_id),
                json=body,
                headers={
                    "Authorization": self.api_key,
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
            res.raise_for_status()
        except requests.RequestException as e:
            self._record("error")
            detail = getattr(getattr(e, "response", None), "text", "") or str(e)
            raise BackendFailure(f"Backend request failed: {detail}") from e

        try:
            raw = res.json()
        except ValueError as e:
            self._record("error")
            raise BackendFailure(f"Backend returned a non-JSON body: {e}") from e

        self._record("success")

        if not isinstance(raw, list):
            self.log.warning("Backend returned a non-array body: %s", safe_short(str(raw), 500))

        traces = parse_traces(raw)
        self.log.debug("Trace types: %s", [t.type for t in traces])

        messages = collect_messages(traces)
        if not messages:
            self.log.debug("No text traces in response: %s", safe_short(str(raw), 1000))
            return NO_TEXT_REPLY
        return "\n".join(messages)
