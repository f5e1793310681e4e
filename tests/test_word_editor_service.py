import base64

import pytest

from tuvung.gateway.records import MeaningInput
from tuvung.schemas.word_schema import WordIn
from tuvung.services.word_editor_service import (
    INVALID_ORDER_MESSAGE,
    WordEditorError,
    WordEditorService,
    parse_order,
)
from tests.utils import FakeResponse, create_course, create_lecture, create_word


@pytest.fixture()
def lecture(db_session, owner):
    course = create_course(db_session, creator_id=owner.id)
    return create_lecture(db_session, course)


@pytest.fixture()
def editor(gateway, storage, owner):
    return WordEditorService(gateway, storage, owner)


@pytest.mark.parametrize("raw, expected", [(None, None), ("", None), ("  ", None), ("3", 3), (0, 0)])
def test_parse_order_accepts(raw, expected):
    assert parse_order(raw) == expected


@pytest.mark.parametrize("raw", ["-1", "abc", "1.5", -2, True])
def test_parse_order_rejects(raw):
    with pytest.raises(WordEditorError) as exc:
        parse_order(raw)
    assert exc.value.code == "invalid_order"
    assert str(exc.value) == INVALID_ORDER_MESSAGE


def test_create_word_appends_and_drops_blank_meanings(editor, lecture, db_session):
    create_word(db_session, lecture, "first", order=0)

    created = editor.create_word(
        lecture.lecture_id,
        WordIn(
            text="  cat ",
            order_in_lecture="",
            meanings=[MeaningInput(meaning="con mèo"), MeaningInput(meaning="   ")],
        ),
    )

    assert created.text == "cat"
    assert created.order_in_lecture == 1
    assert [item.meaning for item in created.meanings] == ["con mèo"]
    assert created.meaning_summary == "con mèo"


def test_create_word_validation_runs_before_saving(editor, lecture, gateway):
    with pytest.raises(WordEditorError) as exc:
        editor.create_word(lecture.lecture_id, WordIn(text="   "))
    assert exc.value.code == "empty_text"

    with pytest.raises(WordEditorError) as exc:
        editor.create_word(lecture.lecture_id, WordIn(text="cat", order_in_lecture="-3"))
    assert exc.value.code == "invalid_order"
    assert gateway.fetch_words(lecture.lecture_id).value == []


def test_only_course_owner_can_edit(gateway, storage, learner, lecture):
    with pytest.raises(WordEditorError) as exc:
        WordEditorService(gateway, storage, learner).create_word(lecture.lecture_id, WordIn(text="cat"))
    assert exc.value.status_code == 403

    listing = WordEditorService(gateway, storage, learner).list_words(lecture.lecture_id)
    assert listing.can_edit is False
    assert listing.can_reorder is False


def test_update_keeps_existing_order_when_blank(editor, lecture, db_session):
    word = create_word(db_session, lecture, "cat", order=4, meanings=["mèo"])

    updated = editor.update_word(word.word_id, WordIn(text="cats", order_in_lecture=None))

    assert updated.order_in_lecture == 4
    assert updated.text == "cats"
    assert updated.meaning_summary == "-"


def test_update_unknown_word(editor):
    with pytest.raises(WordEditorError) as exc:
        editor.update_word("missing", WordIn(text="x"))
    assert exc.value.status_code == 404


def test_pending_phrase_audio_is_uploaded_on_save(editor, lecture, http):
    http.add("POST", "/storage/v1/object/word-audios/", FakeResponse(status_code=200, json_data={}))

    created = editor.create_word(
        lecture.lecture_id,
        WordIn(text="good morning", audio_base64=base64.b64encode(b"RIFFclip").decode("ascii")),
    )

    assert created.audio_path.endswith(".wav")
    assert created.audio_url.startswith("https://project.supabase.co/storage/v1/object/public/word-audios/")
    assert http.calls[0]["data"] == b"RIFFclip"


def test_invalid_audio_payload(editor, lecture):
    with pytest.raises(WordEditorError) as exc:
        editor.create_word(lecture.lecture_id, WordIn(text="x", audio_base64="%%%"))
    assert exc.value.code == "invalid_audio"


def test_delete_compacts_remaining_positions(editor, lecture, db_session, gateway):
    create_word(db_session, lecture, "a", order=0)
    b = create_word(db_session, lecture, "b", order=1)
    create_word(db_session, lecture, "c", order=2)

    listing = editor.delete_word(b.word_id)

    assert [(word.text, word.order_in_lecture) for word in listing.words] == [("a", 0), ("c", 1)]
    stored = gateway.fetch_words(lecture.lecture_id).value
    assert [(word.text, word.order_in_lecture) for word in stored] == [("a", 0), ("c", 1)]


def test_reorder_persists_new_positions(editor, lecture, db_session, gateway):
    a = create_word(db_session, lecture, "a", order=0)
    create_word(db_session, lecture, "b", order=1)
    c = create_word(db_session, lecture, "c", order=2)

    result = editor.reorder(lecture.lecture_id, c.word_id, a.word_id)

    assert result.persisted is True
    assert [word.text for word in result.words] == ["c", "a", "b"]
    stored = gateway.fetch_words(lecture.lecture_id).value
    assert [(word.text, word.order_in_lecture) for word in stored] == [("c", 0), ("a", 1), ("b", 2)]


def test_reorder_blocked_while_filtering(editor, lecture, db_session):
    a = create_word(db_session, lecture, "a", order=0)
    b = create_word(db_session, lecture, "b", order=1)

    with pytest.raises(WordEditorError) as exc:
        editor.reorder(lecture.lecture_id, b.word_id, a.word_id, query="a")
    assert exc.value.code == "reorder_not_allowed"


def test_list_words_filters_by_text(editor, lecture, db_session):
    create_word(db_session, lecture, "cat", order=0, meanings=["con mèo", "mèo", "miu", "extra"])
    create_word(db_session, lecture, "dog", order=1)

    listing = editor.list_words(lecture.lecture_id, query="CA")

    assert [word.text for word in listing.words] == ["cat"]
    assert listing.total == 2
    assert listing.words[0].meaning_summary == "con mèo / mèo / miu"


def test_upload_asset_rejects_unknown_bucket(editor):
    with pytest.raises(WordEditorError) as exc:
        editor.upload_asset("private", "a.png", b"x")
    assert exc.value.code == "unknown_bucket"
