import pytest
from fastapi import BackgroundTasks

from tuvung.models.note_model import Note
from tuvung.practice.errors import PracticeError, SessionNotFound
from tuvung.practice.models import DirectionMode, SessionPhase
from tuvung.schemas.practice_schema import PracticeSessionCreate
from tuvung.services.practice_service import PLACEHOLDER_REVIEW, PracticeService
from tests.utils import create_course, create_lecture, create_word


@pytest.fixture()
def lecture(db_session, owner):
    course = create_course(db_session, creator_id=owner.id)
    lecture = create_lecture(db_session, course)
    create_word(db_session, lecture, "cat", meanings=["con mèo"], order=0, audio_url="cat.mp3")
    create_word(db_session, lecture, "dog", meanings=["con chó"], order=1)
    return lecture


def _service(gateway, store, storage, user, rng):
    return PracticeService(gateway, store, storage, user, rng=rng)


def test_start_session_builds_prompt_with_public_audio(gateway, store, storage, learner, rng, lecture):
    service = _service(gateway, store, storage, learner, rng)

    view = service.start_session(PracticeSessionCreate(lecture_ids=[lecture.lecture_id], question_count=2))

    assert view.phase is SessionPhase.ACTIVE
    assert view.total == 2
    assert view.prompt.text == "cat"
    assert view.prompt.audio_url == (
        "https://project.supabase.co/storage/v1/object/public/word-audios/cat.mp3"
    )


def test_meaning_to_word_prompt_shows_primary_meaning(gateway, store, storage, learner, rng, lecture):
    service = _service(gateway, store, storage, learner, rng)

    view = service.start_session(
        PracticeSessionCreate(
            lecture_ids=[lecture.lecture_id],
            direction=DirectionMode.MEANING_TO_WORD,
            question_count=1,
        )
    )

    assert view.prompt.text == "con mèo"
    assert view.prompt.audio_url is None


@pytest.mark.asyncio
async def test_second_miss_records_note_in_background(gateway, store, storage, learner, rng, lecture, db_session):
    service = _service(gateway, store, storage, learner, rng)
    session_id = service.start_session(
        PracticeSessionCreate(lecture_ids=[lecture.lecture_id], question_count=2)
    ).session_id

    first = BackgroundTasks()
    hinted = service.submit(session_id, "con chó", first)
    second = BackgroundTasks()
    missed = service.submit(session_id, "con gà", second)
    await first()
    await second()

    assert hinted.hint == "c*****o"
    assert first.tasks == []
    assert missed.expected == "con mèo"
    note = db_session.query(Note).one()
    assert note.user_id == learner.id
    assert note.note_text == "Sai trong luyện tập"


def test_full_run_reaches_summary(gateway, store, storage, learner, rng, lecture):
    service = _service(gateway, store, storage, learner, rng)
    session_id = service.start_session(
        PracticeSessionCreate(lecture_ids=[lecture.lecture_id], question_count=2)
    ).session_id

    answer = service.submit(session_id, "con meo", BackgroundTasks())
    assert answer.session.follow_up.kind == "advance"
    service.advance(session_id)
    answer = service.submit(session_id, "con chó", BackgroundTasks())
    assert answer.session.follow_up.kind == "complete"
    view = service.advance(session_id)

    assert view.phase is SessionPhase.COMPLETED
    assert view.prompt is None
    assert view.summary.correct == 2
    assert view.summary.accuracy == 100


def test_back_shows_read_only_review(gateway, store, storage, learner, rng, lecture):
    service = _service(gateway, store, storage, learner, rng)
    session_id = service.start_session(
        PracticeSessionCreate(lecture_ids=[lecture.lecture_id], question_count=2, auto_advance=False)
    ).session_id
    service.submit(session_id, "con mèo", BackgroundTasks())
    service.advance(session_id)

    view = service.back(session_id)

    assert view.read_only is True
    assert view.prompt.placeholder == PLACEHOLDER_REVIEW
    assert view.input_text == "con mèo"


def test_word_selection_and_empty_selection(gateway, store, storage, learner, rng, lecture):
    service = _service(gateway, store, storage, learner, rng)
    dog_id = gateway.fetch_words(lecture.lecture_id).value[1].word_id

    view = service.start_session(
        PracticeSessionCreate(lecture_ids=[lecture.lecture_id], word_ids=[dog_id], question_count=3)
    )
    assert view.prompt.text == "dog"
    assert view.total == 3

    with pytest.raises(PracticeError) as exc:
        service.start_session(PracticeSessionCreate(lecture_ids=[lecture.lecture_id], word_ids=[]))
    assert exc.value.code == "no_words"


def test_sessions_are_private(gateway, store, storage, owner, learner, rng, lecture):
    session_id = _service(gateway, store, storage, learner, rng).start_session(
        PracticeSessionCreate(lecture_ids=[lecture.lecture_id])
    ).session_id

    with pytest.raises(SessionNotFound):
        _service(gateway, store, storage, owner, rng).get_session(session_id)


def test_restart_returns_to_configuring(gateway, store, storage, learner, rng, lecture):
    service = _service(gateway, store, storage, learner, rng)
    session_id = service.start_session(PracticeSessionCreate(lecture_ids=[lecture.lecture_id])).session_id

    view = service.restart(session_id)

    assert view.phase is SessionPhase.CONFIGURING
    assert view.total == 0
    assert view.prompt is None


def test_top_missed_words(gateway, store, storage, learner, rng, lecture):
    cat, dog = gateway.fetch_words(lecture.lecture_id).value
    for _ in range(3):
        gateway.record_miss(learner.id, dog.word_id, "miss")
    gateway.record_miss(learner.id, cat.word_id, "miss")

    missed = _service(gateway, store, storage, learner, rng).top_missed_words([lecture.lecture_id])

    assert [(item.text, item.miss_count) for item in missed] == [("dog", 3), ("cat", 1)]
