"""Builds a pronunciation clip for a phrase out of single-word recordings."""

from __future__ import annotations

import io
import logging
from pathlib import PurePosixPath
from typing import List, Optional
from urllib.parse import urlparse

import requests
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from tuvung.core.config import settings

from .dictionary_service import DictionaryService, split_tokens

logger = logging.getLogger(__name__)

MAX_TOKENS = 6
SAMPLE_RATE = 44100
GAP_MS = 120


def _format_from_url(url: str) -> Optional[str]:
    suffix = PurePosixPath(urlparse(url).path).suffix.lstrip(".").lower()
    return suffix or None


class PhraseAudioComposer:
    def __init__(
        self,
        dictionary: DictionaryService | None = None,
        http: requests.Session | None = None,
    ):
        self.http = http or requests.Session()
        self.dictionary = dictionary or DictionaryService(http=self.http)

    def _load_segment(self, url: str) -> Optional[AudioSegment]:
        try:
            response = self.http.get(url, timeout=settings.HTTP_TIMEOUT_SECONDS)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.info("Could not download token audio %s: %s", url, exc)
            return None
        try:
            segment = AudioSegment.from_file(io.BytesIO(response.content), format=_format_from_url(url))
        except (CouldntDecodeError, OSError) as exc:
            logger.info("Could not decode token audio %s: %s", url, exc)
            return None
        return segment.set_channels(1).set_frame_rate(SAMPLE_RATE)

    def compose(self, text: str) -> Optional[bytes]:
        """Return WAV bytes, or ``None`` for single words and when no token has audio."""

        tokens = split_tokens(text, MAX_TOKENS)
        if len(tokens) < 2:
            return None

        segments: List[AudioSegment] = []
        for token in tokens:
            audio_url = self.dictionary.lookup(token).audio
            if not audio_url:
                continue
            segment = self._load_segment(audio_url)
            if segment is not None:
                segments.append(segment)

        if not segments:
            return None

        gap = AudioSegment.silent(duration=GAP_MS, frame_rate=SAMPLE_RATE)
        combined = segments[0]
        for segment in segments[1:]:
            combined += gap + segment

        buffer = io.BytesIO()
        combined.set_sample_width(2).export(buffer, format="wav")
        logger.debug("Composed %s ms of phrase audio from %s tokens", len(combined), len(segments))
        return buffer.getvalue()
