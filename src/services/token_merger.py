"""
AI-assisted merge of design token CSS.

The model receives the current and incoming CSS and returns the merged
text. Output is non-deterministic; callers treat it as opaque text and
only strip Markdown code fences from it.
"""

import logging
import re
from typing import Optional

from databricks_langchain import ChatDatabricks
from langchain_core.messages import HumanMessage

from src.config.settings import AppSettings, get_settings
from src.utils.error_handling import LLMError

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\n?", re.MULTILINE)
_FENCE_CLOSE = re.compile(r"```$", re.MULTILINE)


def clean_markdown_formatting(text: str) -> str:
    """
    Remove Markdown code fences from a model response.

    Args:
        text: Raw response text

    Returns:
        CSS content without fences or surrounding whitespace
    """
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


class TokenMerger:
    """
    Merge incoming design tokens into existing CSS with a chat model.

    Two prompts are supported: the token section prompt (only the
    ``@theme`` .. ``.dark-theme`` span is sent) and the legacy whole-file
    prompt.
    """

    def __init__(self, settings: Optional[AppSettings] = None, model=None):
        """
        Initialize the merger.

        Args:
            settings: Application settings; loaded when omitted
            model: LangChain-compatible chat model; a ChatDatabricks client
                for the configured endpoint is created when omitted
        """
        self.settings = settings or get_settings()
        self.llm = model or self._create_llm()

    def _create_llm(self) -> ChatDatabricks:
        """Create the chat model for merging."""
        return ChatDatabricks(
            endpoint=self.settings.llm.endpoint,
            temperature=self.settings.llm.temperature,
            max_tokens=self.settings.llm.max_tokens,
        )

    def update_token_section(self, old_section: str, new_section: str) -> str:
        """
        Merge a new token section into the current one.

        Args:
            old_section: Token section from the repository file
            new_section: Token section from the incoming CSS

        Returns:
            Updated token section text

        Raises:
            LLMError: If the model call fails or returns nothing
        """
        logger.info(
            "Merging token section (@theme, :root, .dark-theme)",
            extra={"old_chars": len(old_section), "new_chars": len(new_section)},
        )
        merged = self._invoke("token_section_prompt", old_section, new_section)
        logger.info("Token section merged", extra={"merged_chars": len(merged)})
        return merged

    def merge_css(self, old_css: str, new_css: str) -> str:
        """
        Merge a whole incoming stylesheet into the whole repository file.

        Args:
            old_css: Current file content
            new_css: Incoming CSS

        Returns:
            Merged file content

        Raises:
            LLMError: If the model call fails or returns nothing
        """
        logger.info(
            "Merging full CSS file",
            extra={"old_chars": len(old_css), "new_chars": len(new_css)},
        )
        merged = self._invoke("full_file_prompt", old_css, new_css)
        logger.info("CSS file merged", extra={"merged_chars": len(merged)})
        return merged

    def _invoke(self, prompt_key: str, old_css: str, new_css: str) -> str:
        template = self.settings.prompts.get(prompt_key)
        if not template:
            raise LLMError(f"Prompt not configured: {prompt_key}")

        prompt = template.format(old_css=old_css, new_css=new_css)

        try:
            response = self.llm.invoke([HumanMessage(content=prompt)])
        except Exception as e:
            logger.error(f"Merge model call failed: {e}")
            raise LLMError(f"Merge model call failed: {e}") from e

        content = response.content
        if isinstance(content, list):
            # Some providers return content blocks instead of a string
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )

        merged = clean_markdown_formatting(content or "")
        if not merged:
            raise LLMError("Merge model returned an empty response")
        return merged
