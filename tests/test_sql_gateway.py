from sqlalchemy.orm import Session

from tuvung.gateway.records import MeaningInput, WordDraft
from tuvung.gateway.result import Err, Ok
from tuvung.models.note_model import Note
from tests.utils import create_course, create_lecture, create_word


def _lecture(db_session, owner):
    course = create_course(db_session, creator_id=owner.id)
    return course, create_lecture(db_session, course)


def test_fetch_words_orders_by_position(gateway, db_session, owner):
    _, lecture = _lecture(db_session, owner)
    create_word(db_session, lecture, "third", order=2)
    create_word(db_session, lecture, "first", order=0)
    create_word(db_session, lecture, "second", order=1)

    result = gateway.fetch_words(lecture.lecture_id)

    assert isinstance(result, Ok)
    assert [word.text for word in result.value] == ["first", "second", "third"]


def test_fetch_meanings_groups_oldest_first(gateway, db_session, owner):
    _, lecture = _lecture(db_session, owner)
    word = create_word(db_session, lecture, "bank", meanings=["ngân hàng", "bờ sông"])

    result = gateway.fetch_meanings([word.word_id, word.word_id, "missing"])

    assert [item.meaning for item in result.value[word.word_id]] == ["ngân hàng", "bờ sông"]
    assert "missing" not in result.value


def test_next_order_on_empty_and_filled_lecture(gateway, db_session, owner):
    _, lecture = _lecture(db_session, owner)
    assert gateway.next_order(lecture.lecture_id).value == 0

    create_word(db_session, lecture, "a", order=4)

    assert gateway.next_order(lecture.lecture_id).value == 5


def test_insert_update_and_replace_meanings(gateway, db_session, owner):
    _, lecture = _lecture(db_session, owner)

    inserted = gateway.insert_word(lecture.lecture_id, WordDraft(text="cat", order_in_lecture=0)).value
    updated = gateway.update_word(inserted.word_id, WordDraft(text="cats", ipa="/kæts/", order_in_lecture=3))
    saved = gateway.replace_meanings(
        inserted.word_id, [MeaningInput(meaning="con mèo"), MeaningInput(meaning="mèo", part_of_speech="n")]
    )

    assert updated.value.text == "cats"
    assert updated.value.order_in_lecture == 3
    assert [item.meaning for item in saved.value] == ["con mèo", "mèo"]
    refetched = gateway.fetch_meanings([inserted.word_id]).value[inserted.word_id]
    assert [item.meaning for item in refetched] == ["con mèo", "mèo"]


def test_update_and_delete_unknown_word_return_not_found(gateway):
    assert gateway.update_word("nope", WordDraft(text="x")) == Err("Word not found", code="not_found")
    assert isinstance(gateway.delete_word("nope"), Err)


def test_persist_order_assigns_dense_positions(gateway, db_session, owner):
    _, lecture = _lecture(db_session, owner)
    a = create_word(db_session, lecture, "a", order=0)
    b = create_word(db_session, lecture, "b", order=1)
    c = create_word(db_session, lecture, "c", order=2)

    result = gateway.persist_order(lecture.lecture_id, [c.word_id, a.word_id, b.word_id])

    assert isinstance(result, Ok)
    words = gateway.fetch_words(lecture.lecture_id).value
    assert [(word.text, word.order_in_lecture) for word in words] == [("c", 0), ("a", 1), ("b", 2)]


def test_persist_order_rejects_foreign_ids(gateway, db_session, owner):
    _, lecture = _lecture(db_session, owner)
    create_word(db_session, lecture, "a", order=0)

    result = gateway.persist_order(lecture.lecture_id, ["elsewhere"])

    assert isinstance(result, Err)
    assert result.code == "unknown_word"


def test_record_miss_and_counts(gateway, db_session, owner, learner):
    _, lecture = _lecture(db_session, owner)
    word = create_word(db_session, lecture, "a")

    gateway.record_miss(learner.id, word.word_id, "missed")
    gateway.record_miss(learner.id, word.word_id, "missed")
    gateway.record_miss(owner.id, word.word_id, "missed")

    assert db_session.query(Note).count() == 3
    assert gateway.fetch_miss_counts(learner.id, [word.word_id]).value == {word.word_id: 2}


def test_detached_gateway_outlives_the_request_session(gateway, db_session, engine, owner, learner):
    _, lecture = _lecture(db_session, owner)
    word_id = create_word(db_session, lecture, "a").word_id
    db_session.close()

    with gateway.detached() as background:
        assert background.db is not db_session
        assert isinstance(background.record_miss(learner.id, word_id, "missed"), Ok)

    with Session(bind=engine) as fresh:
        assert fresh.query(Note).filter(Note.user_id == learner.id).count() == 1


def test_catalog_queries(gateway, db_session, owner):
    course, lecture = _lecture(db_session, owner)
    create_lecture(db_session, course, title="Lecture 2")

    assert [item.name for item in gateway.fetch_courses().value] == ["English 101"]
    assert gateway.fetch_lecture_counts().value == {course.course_id: 2}
    assert gateway.fetch_lecture(lecture.lecture_id).value.title == "Lecture 1"
    assert gateway.fetch_course("missing").value is None
