import pytest
from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def _mark(tier, operands, operators, answer):
    return client.post(
        "/mark",
        json={"tier": tier, "operands": operands, "operators": operators, "answer": answer},
    )


def _review_keys(tier):
    r = client.get("/review", params={"tier": tier})
    assert r.status_code == 200
    return {item["canonical_key"] for item in r.json()["items"]}


def test_mark_correct_numeric():
    r = _mark(1, [6, 3], ["+"], "9")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True and body["correct"] is True and body["score"] == 5
    assert body["expected"] == 9 and body["steps"] == []


def test_mark_correct_expression_gets_nudge():
    body = _mark(1, [6, 3], ["+"], "4 + 5").json()
    assert body["correct"] is True
    assert "simplest form is 9" in body["feedback"]


def test_mark_respects_precedence():
    body = _mark(6, [8, 2, 3], ["÷", "+"], "7").json()
    assert body["ok"] and body["correct"] and body["score"] == 1


def test_mark_incorrect_records_review_item():
    r = _mark(2, [17, 8], ["-"], "8")
    body = r.json()
    assert body["ok"] is True and body["correct"] is False and body["score"] == 0
    assert body["expected"] == 9
    assert body["method"] == "breaking_ten"
    assert body["steps"] == ["Split 17 into 10 and 7", "10 - 8 = 2", "2 + 7 = 9"]
    assert "17-8" in _review_keys(2)


def test_mark_incorrect_outside_tier_2_gets_plain_steps():
    body = _mark(3, [17, 8], ["-"], "8").json()
    assert body["method"] == "standard"
    assert body["steps"] == ["17 - 8 = 9"]


def test_mark_invalid_chars_not_recorded():
    r = _mark(3, [41, 6], ["-"], "abc")
    body = r.json()
    assert r.status_code == 200
    assert body["ok"] is False
    assert "allowed" in body.get("feedback", "").lower()
    assert "41-6" not in _review_keys(3)


def test_mark_empty_answer():
    body = _mark(1, [2, 2], ["+"], "   ").json()
    assert body["ok"] is False and body["feedback"] == "Answer required."


def test_mark_arity_mismatch_is_422():
    r = _mark(1, [1, 2, 3], ["+"], "6")
    assert r.status_code == 422


def test_mark_unknown_operator_is_422():
    r = _mark(1, [1, 2], ["%"], "1")
    assert r.status_code == 422


def test_mark_unknown_tier():
    r = _mark(12, [1, 2], ["+"], "3")
    assert r.status_code == 404


def test_mark_zero_divisor_is_422():
    r = _mark(4, [5, 0], ["÷"], "0")
    assert r.status_code == 422


@pytest.mark.parametrize(
    "tier,operands,operators,key",
    [
        (4, [7, 2], ["÷"], "7÷2"),  # inexact division
        (5, [6, 6], ["÷"], "6÷6"),  # dividing a number by itself
        (1, [2, 9], ["-"], "2-9"),  # negative answer
        (1, [6, 7], ["×"], "6×7"),  # operator outside the tier
        (4, [4, 3], ["×"], "4×3"),  # answer above the tier's range
        (2, [25, 3], ["-"], "25-3"),  # operand above the tier's range
    ],
)
def test_mark_rejects_problems_the_tier_cannot_serve(tier, operands, operators, key):
    r = _mark(tier, operands, operators, "1")
    assert r.status_code == 422
    assert key not in _review_keys(tier)


def test_mark_accepts_fallback_addition_in_any_tier():
    r = _mark(5, [3, 4], ["+"], "6")
    assert r.status_code == 200
    assert r.json()["correct"] is False
    assert "3+4" in _review_keys(5)
