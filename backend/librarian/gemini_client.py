from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, Optional
from .settings import settings

logger = logging.getLogger(__name__)


class GeminiError(RuntimeError):
	"""Any failure talking to the model: missing key, transport, HTTP status or payload shape."""


class GeminiClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.gemini_api_key
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self._client = httpx.AsyncClient(timeout=30, transport=transport)
		self._fallback_client: Optional[httpx.AsyncClient] = None
		self._fallback_enabled = bool(settings.openrouter_api_key)
		self._openrouter_api_key = settings.openrouter_api_key
		self._openrouter_model = settings.openrouter_model
		self._openrouter_base_url = settings.openrouter_base_url
		self._openrouter_headers = {
			"Authorization": f"Bearer {self._openrouter_api_key}" if self._openrouter_api_key else "",
			"Content-Type": "application/json",
			"HTTP-Referer": settings.openrouter_referer,
			"X-Title": settings.openrouter_title,
		}
		if self._fallback_enabled:
			self._fallback_client = httpx.AsyncClient(timeout=30, transport=transport)

	@property
	def configured(self) -> bool:
		return bool(self.api_key)

	async def generate(
		self,
		prompt: str,
		*,
		response_schema: Optional[Dict[str, Any]] = None,
		temperature: Optional[float] = None,
	) -> str:
		"""Send a single-turn prompt and return the first candidate's text.

		With a response_schema the model is asked for JSON matching it. The
		OpenRouter fallback only receives the prompt, so callers must still
		validate what comes back.
		"""
		payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
		generation_config: Dict[str, Any] = {}
		if response_schema is not None:
			generation_config["responseMimeType"] = "application/json"
			generation_config["responseSchema"] = response_schema
		if temperature is not None:
			generation_config["temperature"] = temperature
		if generation_config:
			payload["generationConfig"] = generation_config
		return await self._post_payload(payload, fallback_prompt=prompt)

	async def _post_payload(self, payload: Dict[str, Any], *, fallback_prompt: Optional[str]) -> str:
		if not self.api_key:
			raise GeminiError("GEMINI_API_KEY is not configured")
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		last_error: Optional[Exception] = None
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			last_error = http_err
		except httpx.RequestError as net_err:
			last_error = net_err
		if last_error is None:
			try:
				data = r.json()
				return data["candidates"][0]["content"]["parts"][0]["text"]
			except (ValueError, KeyError, IndexError, TypeError):
				last_error = GeminiError(f"Unexpected Gemini response: {r.text}")
		if not self._fallback_enabled or fallback_prompt is None:
			raise GeminiError(f"Gemini call failed: {last_error}") from last_error
		logger.warning("Gemini call failed (%s); trying OpenRouter fallback", last_error)
		return await self._fallback_generate(fallback_prompt, last_error)

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()

	async def _fallback_generate(self, prompt: str, primary_error: Optional[Exception]) -> str:
		if not self._fallback_client or not self._openrouter_api_key:
			raise GeminiError("Fallback requested but OpenRouter is not configured") from primary_error
		headers = {k: v for k, v in self._openrouter_headers.items() if v}
		payload: Dict[str, Any] = {
			"model": self._openrouter_model,
			"messages": [{"role": "user", "content": prompt}],
		}
		try:
			r = await self._fallback_client.post(
				self._openrouter_base_url,
				headers=headers,
				json=payload,
			)
			r.raise_for_status()
			data = r.json()
			return data["choices"][0]["message"]["content"]
		except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as fallback_err:
			raise GeminiError(
				f"Gemini primary call failed ({primary_error}); fallback via OpenRouter also failed"
			) from fallback_err


async def get_gemini_client():
	"""FastAPI dependency yielding a request-scoped client."""
	client = GeminiClient()
	try:
		yield client
	finally:
		await client.aclose()
