"""Client for the remote speech recognition service."""

import base64
from dataclasses import dataclass
from typing import Any

import httpx

from .config import (
    DEFAULT_REQUEST_TIMEOUT,
    RECOGNITION_AUTOMATIC_PUNCTUATION,
    RECOGNITION_ENCODING,
    RECOGNITION_ENDPOINT,
    RECOGNITION_LANGUAGE_CODE,
    RECOGNITION_SUCCESS_STATUS,
    SAMPLE_RATE,
)
from .exceptions import SpeechError, SpeechErrorCode
from .logging_utils import get_logger
from .models import RecognitionResponse

logger = get_logger(__name__)


@dataclass(frozen=True)
class RecognitionConfig:
    """Request settings sent alongside the audio payload."""

    endpoint: str = RECOGNITION_ENDPOINT
    encoding: str = RECOGNITION_ENCODING
    sample_rate_hertz: int = SAMPLE_RATE
    language_code: str = RECOGNITION_LANGUAGE_CODE
    enable_automatic_punctuation: bool = RECOGNITION_AUTOMATIC_PUNCTUATION
    timeout: float = DEFAULT_REQUEST_TIMEOUT

    def to_payload(self) -> dict[str, Any]:
        """Render the ``config`` object of a recognize request."""
        return {
            "encoding": self.encoding,
            "sampleRateHertz": self.sample_rate_hertz,
            "languageCode": self.language_code,
            "enableAutomaticPunctuation": self.enable_automatic_punctuation,
        }


def build_request_body(audio: bytes, config: RecognitionConfig) -> dict[str, Any]:
    """Build the JSON body for a recognize request."""
    return {
        "config": config.to_payload(),
        "audio": {"content": base64.b64encode(audio).decode("ascii")},
    }


async def recognize_speech(
    key: str,
    audio: bytes,
    http_client: httpx.AsyncClient | None = None,
    config: RecognitionConfig | None = None,
) -> RecognitionResponse:
    """
    Send mono PCM audio to the recognition service and return its response.

    Exactly one request is made per call. Nothing is retried or cached here.

    Args:
        key: API key for the recognition service
        audio: 48kHz 16-bit mono PCM audio
        http_client: Optional caller-owned client to send the request with
        config: Optional request settings (defaults to the fixed service settings)

    Returns:
        Parsed RecognitionResponse

    Raises:
        SpeechError: NETWORK_REQUEST for transport failures or a non-200 status,
            NETWORK_RESPONSE when the body is not a valid response
    """
    config = config or RecognitionConfig()
    body = build_request_body(audio, config)

    logger.debug(f"Submitting {len(audio)} bytes of audio for recognition")

    try:
        if http_client is not None:
            response = await http_client.post(
                config.endpoint, params={"key": key}, json=body
            )
        else:
            async with httpx.AsyncClient(timeout=config.timeout) as client:
                response = await client.post(
                    config.endpoint, params={"key": key}, json=body
                )
    except httpx.HTTPError as e:
        logger.warning(f"Recognition request failed: {e}")
        raise SpeechError.wrap(SpeechErrorCode.NETWORK_REQUEST, e) from e

    if response.status_code != RECOGNITION_SUCCESS_STATUS:
        logger.warning(
            f"Recognition request returned status {response.status_code} "
            f"{response.reason_phrase}"
        )
        raise SpeechError.wrap(
            SpeechErrorCode.NETWORK_REQUEST,
            f"Request failed with status code {response.status_code} "
            f"{response.reason_phrase}".strip(),
            response,
        )

    try:
        return RecognitionResponse.from_payload(response.json())
    except (TypeError, ValueError) as e:
        logger.warning(f"Recognition response is invalid: {e}")
        raise SpeechError.wrap(
            SpeechErrorCode.NETWORK_RESPONSE,
            "recognize_speech(): response data is invalid",
            response,
        ) from e
