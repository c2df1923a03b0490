from __future__ import annotations
import logging
import httpx
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from .settings import settings

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant specialized in providing detailed, structured responses."
_PLACEHOLDER_KEYS = {"", "your-deepseek-api-key-here"}


class LLMError(RuntimeError):
	"""The chat-completions backend could not produce a response."""


class LLMNotConfiguredError(LLMError):
	pass


@dataclass
class ChatResult:
	text: str
	tokens_used: int
	provider: str


def _parse_completion(data: Dict[str, Any]) -> tuple[str, int]:
	content = data["choices"][0]["message"]["content"]
	if not isinstance(content, str) or not content.strip():
		raise ValueError("empty completion content")
	usage = data.get("usage") or {}
	return content, int(usage.get("total_tokens") or 0)


class ChatClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key if api_key is not None else settings.deepseek_api_key
		self.base_url = base_url or settings.deepseek_base_url
		self.model = model or settings.deepseek_model
		self.temperature = settings.llm_temperature
		self.max_tokens = settings.llm_max_tokens
		self._client = httpx.AsyncClient(timeout=settings.llm_timeout_seconds, transport=transport)
		self._fallback_client: Optional[httpx.AsyncClient] = None
		self._openrouter_api_key = settings.openrouter_api_key
		self._fallback_enabled = bool(self._openrouter_api_key)
		self._openrouter_model = settings.openrouter_model
		self._openrouter_base_url = settings.openrouter_base_url
		self._openrouter_headers = {
			"Authorization": f"Bearer {self._openrouter_api_key}" if self._openrouter_api_key else "",
			"Content-Type": "application/json",
			"HTTP-Referer": settings.openrouter_referer,
			"X-Title": settings.openrouter_title,
		}
		if self._fallback_enabled:
			self._fallback_client = httpx.AsyncClient(timeout=settings.llm_timeout_seconds, transport=transport)

	@property
	def configured(self) -> bool:
		return (self.api_key or "").strip() not in _PLACEHOLDER_KEYS or self._fallback_enabled

	def _messages(self, prompt: str, system_prompt: str) -> List[Dict[str, str]]:
		return [
			{"role": "system", "content": system_prompt},
			{"role": "user", "content": prompt},
		]

	async def complete(self, prompt: str, *, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> ChatResult:
		if not self.configured:
			raise LLMNotConfiguredError("DEEPSEEK_API_KEY is not configured")
		primary_ready = (self.api_key or "").strip() not in _PLACEHOLDER_KEYS
		last_error: Optional[Exception] = None
		if primary_ready:
			payload: Dict[str, Any] = {
				"model": self.model,
				"messages": self._messages(prompt, system_prompt),
				"temperature": self.temperature,
				"max_tokens": self.max_tokens,
			}
			headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
			try:
				r = await self._client.post(self.base_url, headers=headers, json=payload)
				r.raise_for_status()
			except httpx.HTTPStatusError as http_err:
				last_error = http_err
			except httpx.RequestError as net_err:
				last_error = net_err
			if last_error is None:
				try:
					text, tokens = _parse_completion(r.json())
					return ChatResult(text=text, tokens_used=tokens, provider="deepseek")
				except (ValueError, KeyError, IndexError, TypeError):
					last_error = LLMError(f"Unexpected completion response: {r.text[:200]}")
			logger.warning("Primary chat backend failed: %s", last_error)
		if not self._fallback_enabled:
			raise LLMError(f"Chat backend call failed: {last_error}") from last_error
		return await self._fallback_complete(prompt, system_prompt, last_error)

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()

	async def _fallback_complete(self, prompt: str, system_prompt: str, primary_error: Optional[Exception]) -> ChatResult:
		if not self._fallback_client or not self._openrouter_api_key:
			raise LLMError("Fallback requested but OpenRouter is not configured") from primary_error
		headers = {k: v for k, v in self._openrouter_headers.items() if v}
		payload: Dict[str, Any] = {
			"model": self._openrouter_model,
			"messages": self._messages(prompt, system_prompt),
		}
		try:
			r = await self._fallback_client.post(
				self._openrouter_base_url,
				headers=headers,
				json=payload,
			)
			r.raise_for_status()
			text, tokens = _parse_completion(r.json())
		except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as fallback_err:
			if primary_error is not None:
				raise LLMError(
					f"Primary chat backend failed ({primary_error}); fallback via OpenRouter also failed"
				) from fallback_err
			raise LLMError(f"OpenRouter call failed: {fallback_err}") from fallback_err
		return ChatResult(text=text, tokens_used=tokens, provider="openrouter")


async def get_chat_client():
	client = ChatClient()
	try:
		yield client
	finally:
		await client.aclose()
