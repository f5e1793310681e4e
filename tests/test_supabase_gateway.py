import requests

from tuvung.gateway.records import MeaningInput
from tuvung.gateway.result import Err, Ok
from tuvung.gateway.supabase_gateway import SupabaseGateway
from tests.utils import FakeResponse


def _gateway(http, **kwargs):
    return SupabaseGateway(base_url="https://project.supabase.co/", api_key="anon-key", http=http, **kwargs)


def test_fetch_words_uses_in_filter_and_forwards_token(http):
    http.add(
        "GET",
        "/rest/v1/words",
        FakeResponse(
            json_data=[{"word_id": "w1", "lecture_id": "l1", "text": "cat", "order_in_lecture": 0}]
        ),
    )
    gateway = _gateway(http, access_token="user-jwt")

    result = gateway.fetch_words_for_lectures(["l1", "l2"])

    assert isinstance(result, Ok)
    assert result.value[0].text == "cat"
    call = http.calls[0]
    assert call["url"] == "https://project.supabase.co/rest/v1/words"
    assert call["params"]["lecture_id"] == 'in.("l1","l2")'
    assert call["params"]["order"] == "order_in_lecture.asc"
    assert call["headers"]["Authorization"] == "Bearer user-jwt"
    assert call["headers"]["apikey"] == "anon-key"


def test_error_payload_is_flattened(http):
    http.add(
        "GET",
        "/rest/v1/wordmeanings",
        FakeResponse(
            status_code=401,
            json_data={"message": "JWT expired", "code": "PGRST301", "hint": None},
        ),
    )

    result = _gateway(http).fetch_meanings(["w1"])

    assert result == Err("JWT expired | PGRST301", code="PGRST301")


def test_network_error_becomes_err(http):
    http.add("POST", "/rest/v1/note", requests.ConnectionError("offline"))

    result = _gateway(http).record_miss("u1", "w1", "missed")

    assert isinstance(result, Err)
    assert result.code == "network_error"


def test_persist_order_calls_rpc(http):
    http.add("POST", "/rest/v1/rpc/reorder_words", FakeResponse(status_code=204))

    result = _gateway(http).persist_order("l1", ["c", "a", "b"])

    assert result == Ok(None)
    assert http.calls[0]["json"] == {"p_lecture_id": "l1", "p_word_ids": ["c", "a", "b"]}


def test_replace_meanings_deletes_then_inserts(http):
    http.add("DELETE", "/rest/v1/wordmeanings", FakeResponse(status_code=204))
    http.add(
        "POST",
        "/rest/v1/wordmeanings",
        lambda call: FakeResponse(
            status_code=201,
            json_data=[{"word_id": "w1", "meaning": row["meaning"]} for row in call["json"]],
        ),
    )

    result = _gateway(http).replace_meanings("w1", [MeaningInput(meaning="con mèo")])

    assert [call["method"] for call in http.calls] == ["DELETE", "POST"]
    assert [item.meaning for item in result.value] == ["con mèo"]
    assert http.calls[1]["headers"]["Prefer"] == "return=representation"


def test_missing_base_url_is_reported(http):
    gateway = _gateway(http)
    gateway.base_url = ""

    result = gateway.fetch_courses()

    assert result.code == "not_configured"
    assert http.calls == []


def test_next_order_reads_highest_position(http):
    http.add("GET", "/rest/v1/words", FakeResponse(json_data=[{"order_in_lecture": 7}]))

    assert _gateway(http).next_order("l1") == Ok(8)


def test_detached_supabase_gateway_is_itself(http):
    gateway = _gateway(http, access_token="user-jwt")

    with gateway.detached() as background:
        assert background is gateway
