"""
Claudeバックエンド
"""
from anthropic import AsyncAnthropic
import anthropic
from typing import Iterable, Optional
import logging

from immersive_translate.exceptions import APIException, APIRateLimitException
from immersive_translate.models.llm_response import (
    ReasoningChunk,
    ToolCallChunk,
    ToolResultChunk,
)
from immersive_translate.services.backends.base import ChunkHandler, LLMBackend
from immersive_translate.utils.retry import async_retry

logger = logging.getLogger(__name__)


def _retry_after(error: anthropic.APIStatusError) -> Optional[float]:
    """retry-afterヘッダー（秒）を取得"""
    value = error.response.headers.get("retry-after")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class ClaudeBackend(LLMBackend):
    """Anthropic Messages APIによる生成"""

    name = "claude"

    def __init__(
        self,
        api_key: str,
        default_model: str = "claude-sonnet-4-5-20250929",
        max_tokens: int = 8000,
        timeout: float = 120.0
    ):
        super().__init__(default_model)
        self.client = AsyncAnthropic(api_key=api_key)
        self.max_tokens = max_tokens
        self.timeout = timeout

    @async_retry(
        max_retries=3,
        base_delay=2.0,
        max_delay=60.0
    )
    async def generate(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        model: Optional[str] = None,
        stream: bool = False,
        on_chunk: Optional[ChunkHandler] = None
    ) -> str:
        """Claudeでテキスト生成（レート制限時はリトライ）"""
        kwargs = {
            "model": self.resolve_model(model),
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "timeout": self.timeout,
        }
        if system:
            kwargs["system"] = system

        logger.info(f"Sending request to {kwargs['model']} (stream={stream})")

        try:
            if stream:
                async with self.client.messages.stream(**kwargs) as message_stream:
                    async for event in message_stream:
                        if event.type == "content_block_stop":
                            self._emit_block(event.content_block, on_chunk)
                    message = await message_stream.get_final_message()
            else:
                message = await self.client.messages.create(**kwargs)
                for block in message.content:
                    self._emit_block(block, on_chunk)

        except anthropic.RateLimitError as e:
            raise APIRateLimitException(
                f"Claude rate limited: {e.message}",
                retry_after=_retry_after(e)
            ) from e
        except anthropic.APIStatusError as e:
            raise APIException(
                f"Claude API error: {e.message}",
                status_code=e.status_code
            ) from e
        except anthropic.APIError as e:
            raise APIException(f"Claude API error: {str(e)}") from e

        text = self._collect_text(message.content)
        logger.info(f"Generation completed. Output length: {len(text)} chars")
        return text

    @staticmethod
    def _emit_block(block, on_chunk: Optional[ChunkHandler]) -> None:
        """テキスト以外のコンテンツブロックを途中経過として通知"""
        if on_chunk is None:
            return
        block_type = block.type
        if block_type == "thinking":
            on_chunk(ReasoningChunk(text=block.thinking))
        elif block_type == "redacted_thinking":
            on_chunk(ReasoningChunk(text=""))
        elif block_type in ("tool_use", "server_tool_use"):
            on_chunk(ToolCallChunk(name=block.name, arguments=dict(block.input or {})))
        elif block_type.endswith("_tool_result"):
            on_chunk(ToolResultChunk(name=block_type, content=block.content))

    @staticmethod
    def _collect_text(blocks: Iterable) -> str:
        return "".join(block.text for block in blocks if block.type == "text")
