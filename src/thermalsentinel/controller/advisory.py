"""
AI Incident Advisory
====================
Asks a generative-text service for a short diagnosis of an overheat
incident. The answer is an opaque string; nothing in the visualization or
alert logic depends on it.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import requests

from thermalsentinel.config import ADVISORY_MODEL, ADVISORY_URL, REQUEST_TIMEOUT_S, resolve_api_key
from thermalsentinel.model.records import AlertRecord, ThermalFrame

logger = logging.getLogger(__name__)

NO_ANALYSIS_MESSAGE = "Could not generate an analysis."
MISSING_KEY_MESSAGE = "Error: API key is not configured."
SERVICE_ERROR_MESSAGE = "Error connecting to the AI analysis service."


class MissingCredentialError(Exception):
    """No API key anywhere; raised before any request is made."""


class AdvisoryError(Exception):
    """The generative service failed or answered with something unusable."""


def build_prompt(alert: AlertRecord, frame: Optional[ThermalFrame] = None) -> str:
    """Incident prompt; uses the frame statistics when a matrix is loaded."""
    if frame is not None:
        context = (
            f"Maximum temperature: {frame.max_temp:.1f}°C, "
            f"Differential: {frame.max_temp - frame.min_temp:.1f}°C"
        )
    else:
        context = f"Maximum recorded temperature: {alert.max_temp:.1f}°C (detailed matrix data not available)"

    timestamp = datetime.fromtimestamp(alert.timestamp).strftime("%Y-%m-%d %H:%M:%S")
    return (
        "Act as an expert engineer in industrial thermal analysis. Analyse the following turbine incident:\n"
        f"- {context}\n"
        f"- File: {alert.dataset_path}\n"
        f"- Turbine ID: {alert.turbine_token}\n"
        f"- Angle: {alert.angle}°\n"
        f"- Timestamp: {timestamp}\n\n"
        "Provide a brief diagnosis (max 3 lines) of the likely cause of the overheating "
        "and an immediate recommendation."
    )


class AdvisoryClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = ADVISORY_MODEL,
        timeout: float = REQUEST_TIMEOUT_S * 6,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def analyse(self, prompt: str) -> str:
        """
        Send the prompt and return the model's text.

        Raises:
            MissingCredentialError: No key configured.
            AdvisoryError: Transport failure, non-2xx answer or malformed body.
        """
        if not self.api_key:
            raise MissingCredentialError("API key is not configured.")

        url = ADVISORY_URL.format(model=self.model)
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            response = self.session.post(
                url,
                json=body,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Advisory request failed: {e}")
            raise AdvisoryError(str(e)) from e

        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            logger.warning("Advisory response has no candidates.")
            return NO_ANALYSIS_MESSAGE
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()
        return text or NO_ANALYSIS_MESSAGE


def run_advisory(
    alert: AlertRecord,
    frame: Optional[ThermalFrame] = None,
    client: Optional[AdvisoryClient] = None,
    remote_key: Optional[str] = None,
) -> str:
    """
    User-facing entry point: always returns text to show, never raises.
    """
    client = client or AdvisoryClient(api_key=resolve_api_key(remote_key))
    try:
        return client.analyse(build_prompt(alert, frame))
    except MissingCredentialError:
        logger.info("Advisory skipped: no API key.")
        return MISSING_KEY_MESSAGE
    except AdvisoryError:
        return SERVICE_ERROR_MESSAGE
