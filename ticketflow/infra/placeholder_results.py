import copy
import logging
import random
from typing import Any, Final

from ticketflow.domain.catalog import AnalysisKind
from ticketflow.domain.ports import ResultProvider

logger = logging.getLogger(__name__)

_TRANSCRIPT_TEXT: Final[str] = (
    "Informujemy, że awaria infrastruktury IT została naprawiona. Wszystkie usługi resortu są już "
    "dostępne, a dane podatników niezagrożone. Sytuacja była spowodowana problemami technicznymi. "
    "Centrum informatyki zdiagnozowało przyczynę i rozwiązało problem."
)
_TRANSCRIPT_START_S: Final[float] = 10.5
_WORD_DURATION_S: Final[float] = 0.46
_WORD_JITTER_S: Final[float] = 0.1


def _transcription(rng: random.Random) -> dict[str, Any]:
    words = []
    current = _TRANSCRIPT_START_S
    for word in _TRANSCRIPT_TEXT.split(" "):
        start = current
        current += _WORD_DURATION_S + rng.uniform(-1.0, 1.0) * _WORD_JITTER_S
        words.append({"word": word, "start": round(start, 3), "end": round(current, 3)})
    return {"words": words, "text": " ".join(w["word"] for w in words)}


def _metrics(transcription: dict[str, Any]) -> dict[str, Any]:
    words = transcription["words"]
    duration = words[-1]["end"] - words[0]["start"] if words else 0.0
    wpm = len(words) / (duration / 60.0) if duration > 0 else 0.0
    return {
        "word-count": len(words),
        "duration": round(duration, 3),
        "words-per-minute": round(wpm, 1),
    }


_STATIC: Final[dict[AnalysisKind, dict[str, Any]]] = {
    AnalysisKind.LANGUAGE_COMPLEXITY: {"tier": "B2"},
    AnalysisKind.BACKGROUND_ACTORS: {
        "found-any": True,
        "time-ranges": [{"start": 0.0, "end": 1.0}, {"start": 2.0, "end": 3.0}],
    },
    AnalysisKind.EMOTIONAL_ANALYSIS: {"emotions": {"anger": 0.1, "happiness": 0.9}},
    AnalysisKind.LANGUAGE_ERRORS: {
        "errors": [
            "Word 'are' should be replaced with 'is' in the sentence 'There are not many of them'.",
            "Word 'important' can be replaced with 'crucial' in the sentence "
            "'They are very important' to better convey the message.",
        ]
    },
    AnalysisKind.TARGET_GROUP: {"age-range": [18, 35]},
    AnalysisKind.QUALITY_SUMMARY: {"transcription": 0.9, "audio-gaps": 0.5, "noise-detection": 0.8},
    AnalysisKind.AUDIO: {"sample-rate": 48000, "channels": 2, "loudness-lufs": -16.0},
    AnalysisKind.AUDIO_GAPS: {"gaps": [{"start": 4.2, "end": 5.1}, {"start": 17.8, "end": 18.3}]},
    AnalysisKind.NOISE_DETECTION: {"noise-level": 0.2, "time-ranges": [{"start": 0.0, "end": 0.8}]},
}


class PlaceholderResultProvider(ResultProvider):
    """
    Deterministic stand-in for real analysis output.

    Payloads are built once per provider from ``seed``; callers always get
    their own deep copy.
    """

    def __init__(self, seed: int = 0) -> None:
        transcription = _transcription(random.Random(seed))
        self._payloads: dict[AnalysisKind, dict[str, Any]] = {
            **_STATIC,
            AnalysisKind.TRANSCRIPTION: transcription,
            AnalysisKind.METRICS: _metrics(transcription),
        }

    def result_for(self, kind: AnalysisKind) -> dict[str, Any]:
        payload = self._payloads.get(kind)
        if payload is None:
            logger.warning("No placeholder output for %s; completing with an empty payload", kind)
            return {}
        return copy.deepcopy(payload)
