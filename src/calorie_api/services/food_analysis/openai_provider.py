"""
OpenAI provider for food analysis.

Sends the prompt and image as one multi-part user message through
langchain's ChatOpenAI.
"""

import logging

from langchain_core.messages import HumanMessage

from .base import VisionCompletionClient

logger = logging.getLogger(__name__)


class OpenAIVisionClient(VisionCompletionClient):
    """
    Vision completion using an OpenAI chat model.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        max_tokens: int = 500,
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            model: Vision-capable chat model
            max_tokens: Output token cap per request
        """
        from langchain_openai import ChatOpenAI

        self.model = model
        self.max_tokens = max_tokens
        self._llm = ChatOpenAI(
            model=model,
            api_key=api_key,
            max_tokens=max_tokens,
            max_retries=0,  # One request, one response
        )

    @property
    def provider_name(self) -> str:
        return f"openai/{self.model}"

    async def complete(self, prompt: str, image_url: str) -> str:
        message = HumanMessage(
            content=[
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ]
        )

        logger.info(f"Sending request to {self.provider_name} with image length: {len(image_url)}")
        response = await self._llm.ainvoke([message])

        content = response.content
        if isinstance(content, list):
            # Some models return content blocks instead of a plain string
            content = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in content
            )

        logger.info(f"OpenAI response received: has_content={bool(content)}")
        return content or ""
