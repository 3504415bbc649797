"""
LLM Client for the Gemini API.

Wraps google-generativeai chat sessions for answer phrasing, plus the file-API
helpers used to attach source CSVs to a prompt. The client never interprets
model output; it returns text or None.
"""

import time
from collections.abc import Callable, MutableMapping, Sequence
from pathlib import Path
from typing import Any

import google.generativeai as genai
import structlog
from google.api_core import exceptions as google_exceptions
from google.generativeai.types import BlockedPromptException, StopCandidateException

logger = structlog.get_logger()


class FileProcessingError(RuntimeError):
    """An uploaded file finished processing in a state other than ACTIVE."""


class GeminiClient:
    """
    Client for the Gemini generative API.

    Provides chat generation with prior history and file upload with
    processing-state polling. Uploaded file handles are kept in an injected
    mapping (path -> file) rather than in module-level state.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-2.0-flash",
        system_instruction: str | None = None,
        temperature: float = 0.5,
        top_p: float = 0.95,
        top_k: int = 40,
        max_output_tokens: int = 8192,
        response_mime_type: str = "text/plain",
        timeout: float = 60.0,
        poll_interval: float = 10.0,
        file_cache: MutableMapping[str, Any] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key (client is unavailable without one)
            model: Model name (default: gemini-2.0-flash)
            system_instruction: System prompt applied to every chat
            temperature: Sampling temperature
            top_p: Nucleus sampling threshold
            top_k: Top-k sampling
            max_output_tokens: Response length cap
            response_mime_type: Response MIME type (default: text/plain)
            timeout: Request timeout in seconds
            poll_interval: Seconds between file state checks
            file_cache: Mapping for uploaded file handles (default: new dict)
            sleep: Sleep function used while polling (injectable for tests)
        """
        self.api_key = api_key
        self.model = model
        self.system_instruction = system_instruction
        self.generation_config = {
            "temperature": temperature,
            "top_p": top_p,
            "top_k": top_k,
            "max_output_tokens": max_output_tokens,
            "response_mime_type": response_mime_type,
        }
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.file_cache: MutableMapping[str, Any] = file_cache if file_cache is not None else {}
        self._sleep = sleep
        self._model = None
        self._configured = False

    @classmethod
    def from_config(cls, config: dict[str, Any], api_key: str | None, **kwargs: Any) -> "GeminiClient":
        """Build a client from the application config dict."""
        return cls(
            api_key=api_key,
            model=config["gemini_model"],
            system_instruction=config["system_instruction"],
            temperature=config["temperature"],
            top_p=config["top_p"],
            top_k=config["top_k"],
            max_output_tokens=config["max_output_tokens"],
            response_mime_type=config["response_mime_type"],
            timeout=config["llm_timeout_seconds"],
            poll_interval=config["file_poll_interval_seconds"],
            **kwargs,
        )

    def is_available(self) -> bool:
        """
        Check if the client can make requests.

        Returns:
            True if an API key is configured, False otherwise
        """
        return bool(self.api_key)

    def _configure(self) -> None:
        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True

    def _get_model(self):
        if self._model is None:
            self._configure()
            self._model = genai.GenerativeModel(
                model_name=self.model,
                system_instruction=self.system_instruction,
                generation_config=self.generation_config,
            )
        return self._model

    def generate(
        self,
        prompt: str,
        history: Sequence[dict[str, Any]] | None = None,
        files: Sequence[Any] | None = None,
    ) -> str | None:
        """
        Send a message in a chat seeded with prior turns.

        Args:
            prompt: User message for this turn
            history: Prior turns as {"role": "user" | "model", "parts": [...]}
            files: Optional uploaded file handles to attach before the prompt

        Returns:
            Generated text, or None on error
        """
        if not self.is_available():
            logger.warning("gemini_not_available", model=self.model, reason="missing_api_key")
            return None

        try:
            chat = self._get_model().start_chat(history=list(history or []))
            content: Any = [*files, prompt] if files else prompt
            response = chat.send_message(content, request_options={"timeout": self.timeout})
            text = response.text
        except google_exceptions.DeadlineExceeded:
            logger.warning("gemini_timeout", timeout_seconds=self.timeout, model=self.model)
            return None
        except google_exceptions.GoogleAPIError as e:
            logger.warning("gemini_generate_error", error=str(e), model=self.model)
            return None
        except (BlockedPromptException, StopCandidateException) as e:
            logger.warning("gemini_response_blocked", error_type=type(e).__name__, error=str(e), model=self.model)
            return None
        except ValueError as e:
            # response.text raises ValueError when the candidate was blocked or empty
            logger.warning("gemini_empty_response", error=str(e), model=self.model)
            return None

        logger.info("gemini_generate_success", model=self.model, response_length=len(text))
        return text

    def upload_file(self, path: str | Path, mime_type: str = "text/csv") -> Any:
        """
        Upload a file to the Gemini file API (once per path).

        Args:
            path: Local file path
            mime_type: MIME type of the file

        Returns:
            Uploaded file handle (cached handle if already uploaded)
        """
        key = str(path)
        if key in self.file_cache:
            return self.file_cache[key]

        self._configure()
        uploaded = genai.upload_file(path=key, mime_type=mime_type, display_name=Path(key).name)
        logger.info("gemini_file_uploaded", display_name=uploaded.display_name, name=uploaded.name)
        self.file_cache[key] = uploaded
        return uploaded

    def wait_for_files_active(self, files: Sequence[Any]) -> list[Any]:
        """
        Block until every uploaded file has finished processing.

        Args:
            files: Uploaded file handles

        Returns:
            Refreshed file handles, all ACTIVE

        Raises:
            FileProcessingError: If a file ends in a state other than ACTIVE
        """
        logger.info("gemini_files_waiting", count=len(files))
        ready = []
        for name in [f.name for f in files]:
            current = genai.get_file(name)
            while current.state.name == "PROCESSING":
                self._sleep(self.poll_interval)
                current = genai.get_file(name)
            if current.state.name != "ACTIVE":
                raise FileProcessingError(f"File {current.name} failed to process")
            ready.append(current)
        logger.info("gemini_files_ready", count=len(ready))
        return ready
