import json
from unittest.mock import MagicMock, patch

from truthtable.llm.config import LLMConfig
from truthtable.llm.groq_client import _build_user_message, summarize_reviews

SAMPLE_REVIEWS = [
    "The al pastor tacos were juicy and the salsa verde had real heat.",
    "Long line at lunch but it moved quickly. Staff were friendly.",
    "Tortillas were a bit dry this time and the dining room was loud.",
]

ENABLED_CONFIG = LLMConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = LLMConfig(api_key="test-key", enabled=False)


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@patch("truthtable.llm.groq_client.Groq")
def test_summarize_reviews_returns_summary(mock_groq_cls):
    llm_response = json.dumps({
        "summary": "Diners love the al pastor. Lunch lines are long but move fast.",
        "highlights": ["al pastor", "salsa verde", "friendly staff", "quick line"],
        "concerns": ["dry tortillas", "noisy dining room"],
    })
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(llm_response)

    result = summarize_reviews(SAMPLE_REVIEWS, "Taco Loco", config=ENABLED_CONFIG)

    assert result.summary.startswith("Diners love the al pastor")
    assert result.highlights == ["al pastor", "salsa verde", "friendly staff"]
    assert result.concerns == ["dry tortillas", "noisy dining room"]


@patch("truthtable.llm.groq_client.Groq")
def test_summarize_reviews_fallback_on_api_error(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")

    assert summarize_reviews(SAMPLE_REVIEWS, "Taco Loco", config=ENABLED_CONFIG) is None


@patch("truthtable.llm.groq_client.Groq")
def test_summarize_reviews_fallback_on_bad_json(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("not valid json{{{")

    assert summarize_reviews(SAMPLE_REVIEWS, "Taco Loco", config=ENABLED_CONFIG) is None


@patch("truthtable.llm.groq_client.Groq")
def test_summarize_reviews_empty_summary_is_none(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response('{"summary": ""}')

    assert summarize_reviews(SAMPLE_REVIEWS, "Taco Loco", config=ENABLED_CONFIG) is None


def test_summarize_reviews_disabled():
    assert summarize_reviews(SAMPLE_REVIEWS, "Taco Loco", config=DISABLED_CONFIG) is None


def test_summarize_reviews_without_key():
    assert summarize_reviews(SAMPLE_REVIEWS, "Taco Loco", config=LLMConfig(api_key="", enabled=True)) is None


@patch("truthtable.llm.groq_client.Groq")
def test_summarize_reviews_no_text_skips_call(mock_groq_cls):
    assert summarize_reviews(["", "   "], "Taco Loco", config=ENABLED_CONFIG) is None
    mock_groq_cls.assert_not_called()


def test_user_message_truncates_reviews():
    config = LLMConfig(api_key="test-key", max_reviews=2, max_review_chars=10)
    message = _build_user_message(SAMPLE_REVIEWS, "Taco Loco", config)
    assert "Taco Loco" in message
    assert "3." not in message
    assert "The al pas" in message
    assert "The al past" not in message


def test_enabled_switch_read_at_creation(monkeypatch):
    monkeypatch.setenv("TRUTHTABLE_LLM_ENABLED", "false")
    assert LLMConfig(api_key="test-key").enabled is False
    monkeypatch.delenv("TRUTHTABLE_LLM_ENABLED")
    assert LLMConfig(api_key="test-key").enabled is True
