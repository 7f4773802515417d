import time
import logging
from decimal import Decimal, InvalidOperation

import httpx

from app.core.config import get_settings


logger = logging.getLogger(__name__)

SIMULATED_BALANCE = Decimal("1000")


class ArkeselApiError(Exception):
    def __init__(self, message: str, *, status_code: int | None = None, raw: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.raw = raw


def is_retryable(exc: ArkeselApiError) -> bool:
    # Network failures carry no status. Other 4xx responses are final.
    return exc.status_code is None or exc.status_code >= 500 or exc.status_code == 429


def parse_balance_response(payload) -> Decimal:
    """Pull the credit balance out of either Arkesel response shape.

    The v1 API answers ``{"balance": 12.5, "user": ...}``; some accounts get
    ``{"code": "000", "data": {"balance": ...}}`` instead. A non-"000" code is
    an error regardless of what else is present.
    """
    if not isinstance(payload, dict):
        raise ArkeselApiError("Arkesel returned an unexpected balance payload.", raw=str(payload))
    code = payload.get("code")
    if code not in (None, "", "000", "ok"):
        message = payload.get("message") or "Authentication failed"
        raise ArkeselApiError(f"Arkesel balance error {code}: {message}", status_code=400, raw=str(payload))

    raw_balance = payload.get("balance")
    if raw_balance is None and isinstance(payload.get("data"), dict):
        raw_balance = payload["data"].get("balance")
    if raw_balance in (None, ""):
        raise ArkeselApiError("Arkesel balance response did not include a balance.", raw=str(payload))
    try:
        return Decimal(str(raw_balance))
    except InvalidOperation as exc:
        raise ArkeselApiError("Arkesel returned a non-numeric balance.", raw=str(payload)) from exc


class ArkeselClient:
    def __init__(self, settings=None):
        settings = settings or get_settings()
        self.base_url = str(settings.arkesel_base_url).rstrip("/")
        self.api_key = settings.arkesel_api_key
        self.timeout = settings.arkesel_timeout_seconds
        self.retry_count = settings.arkesel_retry_count
        self.test_mode = settings.arkesel_test_mode
        self.balance_path = str(settings.arkesel_balance_path or "/sms/api").strip() or "/sms/api"

    def _extract_error_message(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            data = {}
        if isinstance(data, dict):
            for key in ("message", "detail", "error"):
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
        text = (response.text or "").strip()
        return text[:300] if text else f"HTTP {response.status_code}"

    def _get_once(self, path: str, query: dict) -> dict:
        start = time.monotonic()
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(f"{self.base_url}{path}", params=query, headers={"Accept": "application/json"})
        except httpx.TransportError as exc:
            raise ArkeselApiError("Unable to reach SMS provider.", raw=str(exc)) from exc
        logger.info(
            "Arkesel API GET %s status=%s duration=%sms",
            path,
            response.status_code,
            round((time.monotonic() - start) * 1000, 2),
        )
        if response.status_code >= 400:
            raise ArkeselApiError(
                self._extract_error_message(response),
                status_code=response.status_code,
                raw=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ArkeselApiError(
                "Arkesel returned invalid JSON response.",
                status_code=response.status_code,
                raw=response.text,
            ) from exc

    def _get(self, path: str, params: dict | None = None) -> dict:
        if not self.api_key:
            raise ArkeselApiError("Arkesel API key not configured", status_code=500)
        query = {"api_key": self.api_key, "response": "json", **(params or {})}
        attempts = self.retry_count + 1
        for attempt in range(1, attempts + 1):
            try:
                return self._get_once(path, query)
            except ArkeselApiError as exc:
                if attempt == attempts or not is_retryable(exc):
                    raise
                logger.warning("Arkesel GET %s failed (attempt %s/%s): %s", path, attempt, attempts, exc.message)
                time.sleep(0.5 * attempt)

    def get_balance(self) -> Decimal:
        if self.test_mode:
            return SIMULATED_BALANCE
        payload = self._get(self.balance_path, {"action": "check-balance"})
        return parse_balance_response(payload)
