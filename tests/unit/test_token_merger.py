"""Tests for the AI-assisted token merge service.

The chat model is always a mock; no real endpoint is called.

Run: pytest tests/unit/test_token_merger.py -v
"""

from unittest.mock import MagicMock, patch

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from src.services.token_merger import TokenMerger, clean_markdown_formatting
from src.utils.error_handling import LLMError


class TestCleanMarkdownFormatting:
    """Tests for clean_markdown_formatting function."""

    def test_removes_css_fence(self):
        text = "```css\n@theme {\n}\n```"
        assert clean_markdown_formatting(text) == "@theme {\n}"

    def test_removes_bare_fence(self):
        text = "```\n:root {\n}\n```\n"
        assert clean_markdown_formatting(text) == ":root {\n}"

    def test_plain_css_untouched(self):
        text = "@theme {\n  --a: 1;\n}"
        assert clean_markdown_formatting(f"  {text}\n\n") == text


class TestTokenMerger:
    """Tests for TokenMerger."""

    def _merger(self, make_settings, content="@theme {\n}"):
        model = MagicMock()
        model.invoke.return_value = AIMessage(content=content)
        return TokenMerger(settings=make_settings(), model=model), model

    def test_update_token_section_formats_prompt(self, make_settings):
        merger, model = self._merger(make_settings, "@theme { --a: 2; }")

        result = merger.update_token_section("@theme { --a: 1; }", "@theme { --a: 2; }")

        assert result == "@theme { --a: 2; }"
        messages = model.invoke.call_args[0][0]
        assert len(messages) == 1
        assert isinstance(messages[0], HumanMessage)
        assert messages[0].content.startswith("SECTION")
        assert "OLD:\n@theme { --a: 1; }" in messages[0].content
        assert "NEW:\n@theme { --a: 2; }" in messages[0].content

    def test_merge_css_uses_full_file_prompt(self, make_settings):
        merger, model = self._merger(make_settings, ".a {}")

        merger.merge_css(".a {}", ".b {}")

        assert model.invoke.call_args[0][0][0].content.startswith("FILE")

    def test_strips_markdown_from_response(self, make_settings):
        merger, _ = self._merger(make_settings, "```css\n@theme {\n}\n```")
        assert merger.update_token_section("a", "b") == "@theme {\n}"

    def test_content_blocks_are_joined(self, make_settings):
        merger, model = self._merger(make_settings)
        model.invoke.return_value = AIMessage(
            content=[{"type": "text", "text": "@theme {"}, {"type": "text", "text": "\n}"}]
        )

        assert merger.update_token_section("a", "b") == "@theme {\n}"

    def test_empty_response_raises(self, make_settings):
        merger, _ = self._merger(make_settings, "  ```css\n```  ")

        with pytest.raises(LLMError, match="empty response"):
            merger.update_token_section("a", "b")

    def test_model_failure_raises_llm_error(self, make_settings):
        merger, model = self._merger(make_settings)
        model.invoke.side_effect = Exception("endpoint timeout")

        with pytest.raises(LLMError, match="endpoint timeout"):
            merger.update_token_section("a", "b")

    def test_missing_prompt_raises(self, make_settings):
        model = MagicMock()
        merger = TokenMerger(settings=make_settings(prompts={}), model=model)

        with pytest.raises(LLMError, match="Prompt not configured"):
            merger.merge_css("a", "b")
        model.invoke.assert_not_called()

    def test_creates_databricks_model_from_settings(self, make_settings):
        settings = make_settings(llm={"endpoint": "claude-endpoint", "max_tokens": 4000})

        with patch("src.services.token_merger.ChatDatabricks") as mock_chat:
            merger = TokenMerger(settings=settings)

        mock_chat.assert_called_once_with(endpoint="claude-endpoint", temperature=0.0, max_tokens=4000)
        assert merger.llm is mock_chat.return_value
