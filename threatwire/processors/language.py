from __future__ import annotations

import os
from typing import Sequence

from langdetect.detector_factory import PROFILES_DIRECTORY, DetectorFactory
from langdetect.lang_detect_exception import LangDetectException

from ..utils.logging import get_logger

logger = get_logger("tw.processors.language")

# English plus a handful of neighbours so that near-English text is not
# forced onto the only candidate.
DEFAULT_LANGUAGES = ("en", "de", "fr", "es", "ru", "zh-cn")
ACCEPTED_LANGUAGE = "en"


class LanguageFilter:
    """Accept only text detected as English.

    Profiles are loaded once at construction (the expensive part). Each call
    builds its own ``Detector``, which carries a private random generator seeded
    from the factory, and the factory is only read afterwards, so one instance
    is shared by every fetch worker without locking.

    Policy when detection is not confident: reject. That covers empty text,
    text with no usable features, and a best guess below ``min_confidence``.
    """

    def __init__(
        self,
        languages: Sequence[str] = DEFAULT_LANGUAGES,
        *,
        min_confidence: float = 0.5,
        seed: int = 0,
    ) -> None:
        if ACCEPTED_LANGUAGE not in languages:
            raise ValueError(f"candidate languages must include '{ACCEPTED_LANGUAGE}'")
        self.languages = tuple(languages)
        self.min_confidence = min_confidence
        self._factory = DetectorFactory()
        self._factory.seed = seed
        self._factory.load_json_profile([self._read_profile(code) for code in self.languages])
        logger.info("Language detector ready (candidates=%s)", ",".join(self.languages))

    @staticmethod
    def _read_profile(code: str) -> str:
        path = os.path.join(PROFILES_DIRECTORY, code)
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def detect(self, text: str) -> tuple[str, float] | None:
        """Return ``(language, probability)`` of the best guess, or None."""
        if not text or not text.strip():
            return None
        detector = self._factory.create()
        detector.append(text)
        try:
            candidates = detector.get_probabilities()
        except LangDetectException:
            return None
        if not candidates:
            return None
        best = candidates[0]
        return best.lang, best.prob

    def is_accepted(self, text: str) -> bool:
        result = self.detect(text)
        if result is None:
            return False
        lang, prob = result
        return lang == ACCEPTED_LANGUAGE and prob >= self.min_confidence
