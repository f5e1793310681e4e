import io

from pydub import AudioSegment

from tuvung.services.enrichment.dictionary_service import DictionaryService
from tuvung.services.enrichment.phrase_audio import GAP_MS, PhraseAudioComposer
from tests.utils import FakeResponse, dictionary_entry


def _wav(duration_ms: int) -> bytes:
    buffer = io.BytesIO()
    AudioSegment.silent(duration=duration_ms, frame_rate=22050).export(buffer, format="wav")
    return buffer.getvalue()


def _composer(http, audio_by_word):
    def lookup(call):
        term = call["url"].rsplit("/", 1)[1]
        if term not in audio_by_word:
            return FakeResponse(status_code=404, json_data={})
        return FakeResponse(json_data=dictionary_entry(term, audio=audio_by_word[term]))

    http.add("GET", "/entries/en/", lookup)
    return PhraseAudioComposer(dictionary=DictionaryService(http=http), http=http)


def test_compose_joins_token_audio_with_gaps(http):
    http.add("GET", "audio.example/good.wav", FakeResponse(content=_wav(200)))
    http.add("GET", "audio.example/morning.wav", FakeResponse(content=_wav(300)))
    composer = _composer(
        http,
        {"good": "https://audio.example/good.wav", "morning": "https://audio.example/morning.wav"},
    )

    data = composer.compose("good morning")

    assert data is not None
    assert data[:4] == b"RIFF"
    clip = AudioSegment.from_file(io.BytesIO(data), format="wav")
    assert clip.channels == 1
    assert clip.frame_rate == 44100
    assert abs(len(clip) - (200 + GAP_MS + 300)) <= 2


def test_tokens_without_audio_are_skipped(http):
    http.add("GET", "audio.example/good.wav", FakeResponse(content=_wav(200)))
    composer = _composer(http, {"good": "https://audio.example/good.wav"})

    data = composer.compose("good grief")

    clip = AudioSegment.from_file(io.BytesIO(data), format="wav")
    assert abs(len(clip) - 200) <= 2


def test_single_word_or_missing_audio_returns_none(http):
    composer = _composer(http, {})

    assert composer.compose("hello") is None
    assert composer.compose("no such phrase") is None


def test_undecodable_audio_is_ignored(http):
    http.add("GET", "audio.example/bad.wav", FakeResponse(content=b"not audio"))
    composer = _composer(http, {"bad": "https://audio.example/bad.wav", "day": "https://audio.example/bad.wav"})

    assert composer.compose("bad day") is None
