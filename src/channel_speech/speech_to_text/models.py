"""Data models for channel speech-to-text functionality."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class RecognitionAlternative:
    """One candidate transcript for a recognized span of speech."""

    transcript: str
    confidence: float


@dataclass
class RecognitionResult:
    """A group of alternatives for one span of the submitted audio."""

    alternatives: list[RecognitionAlternative]
    is_final: bool = False
    language_code: str | None = None

    @property
    def best_alternative(self) -> RecognitionAlternative | None:
        """The most likely alternative, or None when the service returned none."""
        return self.alternatives[0] if self.alternatives else None


@dataclass
class RecognitionResponse:
    """Represents the payload returned by the speech recognition service."""

    results: list[RecognitionResult]
    total_billed_time: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "RecognitionResponse":
        """
        Build a response from a decoded JSON payload.

        Args:
            payload: Decoded response body

        Returns:
            RecognitionResponse instance

        Raises:
            ValueError: If the payload is not an object with a results list
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Response payload is not an object")

        results = payload.get("results")
        if not isinstance(results, list):
            raise ValueError("Response payload has no results list")

        parsed_results = []
        for entry in results:
            if not isinstance(entry, Mapping):
                continue
            alternatives = [
                RecognitionAlternative(
                    transcript=str(alternative.get("transcript", "")),
                    confidence=float(alternative.get("confidence", 0.0)),
                )
                for alternative in entry.get("alternatives") or []
                if isinstance(alternative, Mapping)
            ]
            parsed_results.append(
                RecognitionResult(
                    alternatives=alternatives,
                    is_final=bool(entry.get("isFinal", False)),
                    language_code=entry.get("languageCode"),
                )
            )

        billed = payload.get("totalBilledTime")
        return cls(
            results=parsed_results,
            total_billed_time=billed if isinstance(billed, str) else None,
            raw=dict(payload),
        )

    @property
    def transcript(self) -> str:
        """Best transcript of every result, joined in order."""
        parts = [
            result.best_alternative.transcript.strip()
            for result in self.results
            if result.best_alternative is not None
        ]
        return " ".join(part for part in parts if part)

    @property
    def confidence(self) -> float:
        """Mean confidence of the best alternatives, 0.0 when there are none."""
        scores = [
            result.best_alternative.confidence
            for result in self.results
            if result.best_alternative is not None
        ]
        if not scores:
            return 0.0
        return sum(scores) / len(scores)

    @property
    def total_billed_seconds(self) -> float | None:
        """Billed duration in seconds, parsed from values such as ``"3.5s"``."""
        if not self.total_billed_time or not self.total_billed_time.endswith("s"):
            return None
        try:
            return float(self.total_billed_time[:-1])
        except ValueError:
            return None
