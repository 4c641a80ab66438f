"""
Geminiバックエンド
"""
from google import genai
from google.genai import errors, types
from typing import List, Optional
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


class GeminiBackend(LLMBackend):
    """Gemini APIによる生成"""

    name = "gemini"

    def __init__(self, api_key: str, default_model: str = "gemini-2.5-flash"):
        super().__init__(default_model)
        self.client = genai.Client(api_key=api_key)

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
        """Geminiでテキスト生成（レート制限時はリトライ）"""
        model_name = self.resolve_model(model)
        config = types.GenerateContentConfig(
            system_instruction=system or None,
            temperature=0.3  # 翻訳には低めのtemperatureが適切
        )

        logger.info(f"Sending request to {model_name} (stream={stream})")

        pieces: List[str] = []
        try:
            if stream:
                response_stream = await self.client.aio.models.generate_content_stream(
                    model=model_name,
                    contents=prompt,
                    config=config
                )
                async for chunk in response_stream:
                    pieces.extend(self._handle_parts(chunk, on_chunk))
            else:
                response = await self.client.aio.models.generate_content(
                    model=model_name,
                    contents=prompt,
                    config=config
                )
                pieces.extend(self._handle_parts(response, on_chunk))

        except errors.APIError as e:
            if e.code == 429:
                raise APIRateLimitException(f"Gemini rate limited: {e.message}") from e
            raise APIException(f"Gemini API error: {e.message}", status_code=e.code) from e

        text = "".join(pieces)
        logger.info(f"Generation completed. Output length: {len(text)} chars")
        return text

    @staticmethod
    def _handle_parts(response, on_chunk: Optional[ChunkHandler]) -> List[str]:
        """パートを振り分け、通常テキストのみを返す"""
        if not response.candidates:
            return []
        content = response.candidates[0].content
        if content is None or not content.parts:
            return []

        texts = []
        for part in content.parts:
            if part.thought:
                if on_chunk:
                    on_chunk(ReasoningChunk(text=part.text or ""))
            elif part.function_call is not None:
                if on_chunk:
                    call = part.function_call
                    on_chunk(ToolCallChunk(name=call.name or "", arguments=dict(call.args or {})))
            elif part.function_response is not None:
                if on_chunk:
                    result = part.function_response
                    on_chunk(ToolResultChunk(name=result.name or "", content=result.response))
            elif part.text:
                texts.append(part.text)
        return texts
