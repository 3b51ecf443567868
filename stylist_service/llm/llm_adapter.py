"""
LLM Adapter (v1.0.0)
Unified chat-completion client with an ordered model fallback chain.

Usage:
    client = get_llm_client()
    if client.is_available():
        text = await client.complete(messages, max_tokens=2000, temperature=0.7)
"""
import re
import json
import asyncio
import logging
from typing import Optional, Any, Dict, List

from openai import AsyncOpenAI, APITimeoutError

from stylist_service.config import get_settings, is_llm_available
from stylist_service.config.llm_config import ActiveLLMConfig, get_llm_config

logger = logging.getLogger(__name__)

Message = Dict[str, str]


class LLMUnavailableError(Exception):
    """LLM disabled, unconfigured, or every model in the chain failed."""


class LLMResponseError(Exception):
    """LLM returned content that could not be parsed."""


class LLMClient:
    """
    Chat-completion client for the configured provider.
    
    Each model in the chain gets up to max_retries attempts; a timeout
    skips straight to the next model.
    """
    
    def __init__(self, config: Optional[ActiveLLMConfig] = None):
        self.config = config or get_llm_config()
        self._openai_client = None
        self._genai = None
        self.last_model: Optional[str] = None
    
    def is_available(self) -> bool:
        return is_llm_available()
    
    def _get_openai(self) -> AsyncOpenAI:
        if self._openai_client is None:
            settings = get_settings()
            if not settings.openai_api_key:
                raise LLMUnavailableError("OPENAI_API_KEY not set")
            
            self._openai_client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout_s,
                max_retries=0,
            )
            logger.info(f"OpenAI-compatible client ready (base_url={self.config.base_url or 'default'})")
        return self._openai_client
    
    def _get_genai(self):
        if self._genai is None:
            import google.generativeai as genai
            
            settings = get_settings()
            if not settings.gemini_api_key:
                raise LLMUnavailableError("GEMINI_API_KEY not set")
            
            genai.configure(api_key=settings.gemini_api_key)
            self._genai = genai
        return self._genai
    
    async def complete(
        self,
        messages: List[Message],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Run a chat completion, walking the model fallback chain.
        
        Raises:
            LLMUnavailableError: LLM disabled or all models failed
        """
        if not self.is_available():
            raise LLMUnavailableError("LLM is disabled or has no API key configured")
        
        max_tokens = max_tokens or self.config.max_tokens
        temperature = self.config.temperature if temperature is None else temperature
        
        for model in self.config.model_chain():
            for attempt in range(1, self.config.max_retries + 1):
                try:
                    logger.info(f"LLM: trying {model} (attempt {attempt}/{self.config.max_retries})")
                    text = await asyncio.wait_for(
                        self._complete_once(model, messages, max_tokens, temperature),
                        timeout=self.config.timeout_s,
                    )
                    if not text or not text.strip():
                        raise LLMResponseError(f"{model} returned empty content")
                    
                    self.last_model = model
                    logger.info(f"✓ LLM success with {model}")
                    return text
                
                except LLMUnavailableError:
                    raise
                except (asyncio.TimeoutError, APITimeoutError):
                    logger.warning(f"LLM: {model} timed out after {self.config.timeout_s}s, trying next model")
                    break
                except Exception as e:
                    logger.warning(f"LLM: {model} attempt {attempt} failed: {e}")
        
        raise LLMUnavailableError("All LLM models failed")
    
    async def _complete_once(
        self,
        model: str,
        messages: List[Message],
        max_tokens: int,
        temperature: float,
    ) -> str:
        if self.config.is_gemini():
            return await self._complete_gemini(model, messages, max_tokens, temperature)
        return await self._complete_openai(model, messages, max_tokens, temperature)
    
    async def _complete_openai(self, model, messages, max_tokens, temperature) -> str:
        response = await self._get_openai().chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return response.choices[0].message.content or ""
    
    async def _complete_gemini(self, model, messages, max_tokens, temperature) -> str:
        genai = self._get_genai()
        
        # Gemini takes a single prompt; system and user turns are concatenated
        combined = "\n\n".join(m["content"] for m in messages if m.get("content"))
        
        response = await genai.GenerativeModel(model).generate_content_async(
            combined,
            generation_config={"max_output_tokens": max_tokens, "temperature": temperature},
        )
        return response.text
    
    def get_status(self) -> dict:
        return {
            "available": self.is_available(),
            "last_model": self.last_model,
            **self.config.to_dict(),
        }


# ==================== JSON PARSING ====================

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def parse_json_response(content: str) -> Any:
    """
    Parse JSON from a potentially messy LLM response.
    
    Handles markdown code fences and prose around the JSON object.
    
    Raises:
        LLMResponseError: No parseable JSON found
    """
    text = (content or "").strip()
    
    fenced = _FENCE_RE.search(text)
    if fenced:
        text = fenced.group(1).strip()
    
    if text.startswith("{") or text.startswith("["):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass
    
    match = _OBJECT_RE.search(text)
    if match:
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise LLMResponseError(f"Invalid JSON in LLM response: {e}") from e
    
    raise LLMResponseError("Could not find JSON in LLM response")


# ==================== SINGLETON ====================

_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get the shared LLM client."""
    global _client
    if _client is None:
        _client = LLMClient()
    return _client


def reset_llm_client():
    """Reset the shared client (for testing and settings reloads)."""
    global _client
    _client = None
