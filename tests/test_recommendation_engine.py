"""Tests for parsing LLM replies and the LLM-backed engine."""

from datetime import datetime

import pytest

from core.domain import ChatMessage, ChatSender
from services.recommendation_engine import LLMRecommendationEngine, parse_recommendations


class StubLLM:
    """Records prompts and returns a canned reply."""

    def __init__(self, reply="[]"):
        self.reply = reply
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        return self.reply


class TestParseRecommendations:
    """Tests for parse_recommendations."""

    def test_json_array(self):
        assert parse_recommendations('["Add signature", "Add date"]', 10) == [
            "Add signature", "Add date",
        ]

    def test_fenced_json_with_prose(self):
        raw = 'Here you go:\n```json\n["Clarify [section] 2", "Add date"]\n```\nHope it helps.'

        assert parse_recommendations(raw, 10) == ["Clarify [section] 2", "Add date"]

    def test_dict_items(self):
        raw = '[{"point": "Add signature"}, {"recommendation": "Add date"}, {"other": 1}]'

        assert parse_recommendations(raw, 10) == ["Add signature", "Add date"]

    def test_bullet_fallback(self):
        raw = "Recommendations:\n- Add signature\n* Add date\n2) Fix title\nThanks"

        assert parse_recommendations(raw, 10) == ["Add signature", "Add date", "Fix title"]

    def test_dedupes_and_drops_blanks(self):
        raw = '["Add date", "  ", "Add date ", "Fix title"]'

        assert parse_recommendations(raw, 10) == ["Add date", "Fix title"]

    def test_limit(self):
        raw = '["a", "b", "c", "d"]'

        assert parse_recommendations(raw, 2) == ["a", "b"]

    def test_nothing_usable(self):
        assert parse_recommendations("I have no suggestions.", 10) == []


class TestLLMRecommendationEngine:
    """Tests for LLMRecommendationEngine with a stub LLM."""

    async def test_extract(self):
        llm = StubLLM('["Add signature", "Add date"]')
        engine = LLMRecommendationEngine(llm, max_recommendations=5)

        points = await engine.extract_recommendations("spec.txt", "Contract text")

        assert points == ["Add signature", "Add date"]
        assert "spec.txt" in llm.prompts[0]
        assert "Contract text" in llm.prompts[0]

    async def test_extract_caps_points(self):
        engine = LLMRecommendationEngine(StubLLM('["a", "b", "c"]'), max_recommendations=2)

        assert await engine.extract_recommendations("spec.txt", "text") == ["a", "b"]

    async def test_empty_text_skips_llm(self):
        llm = StubLLM()
        engine = LLMRecommendationEngine(llm)

        assert await engine.extract_recommendations("spec.txt", "  \n") == []
        assert llm.prompts == []

    async def test_long_text_truncated(self):
        llm = StubLLM()
        engine = LLMRecommendationEngine(llm, max_prompt_chars=10)

        await engine.extract_recommendations("spec.txt", "x" * 500)

        assert "x" * 11 not in llm.prompts[0]
        assert "[...truncated]" in llm.prompts[0]

    async def test_rewrite_lists_points(self):
        llm = StubLLM("Revised text")
        engine = LLMRecommendationEngine(llm)

        result = await engine.rewrite_document("spec.txt", "Original", ["Add signature", "Add date"])

        assert result == "Revised text"
        assert "1. Add signature\n2. Add date" in llm.prompts[0]
        assert "Original" in llm.prompts[0]

    async def test_answer_includes_history(self):
        llm = StubLLM("Sure")
        engine = LLMRecommendationEngine(llm)
        history = [ChatMessage(sender=ChatSender.USER, content="Earlier question",
                               timestamp=datetime(2026, 1, 1))]

        reply = await engine.answer("Why?", None, None, [], history)

        assert reply == "Sure"
        assert "user: Earlier question" in llm.prompts[0]
        assert "No single document is selected." in llm.prompts[0]

    @pytest.mark.parametrize("message", [
        "Apply all recommendations please",
        "can you UPDATE THE DOCUMENT",
        "make the changes",
    ])
    def test_apply_intent(self, message):
        assert LLMRecommendationEngine(StubLLM()).detect_apply_intent(message) is True

    @pytest.mark.parametrize("message", ["What is missing?", "apply", ""])
    def test_no_apply_intent(self, message):
        assert LLMRecommendationEngine(StubLLM()).detect_apply_intent(message) is False
