"""
Client-side generation controller.

Drives one generation cycle for a BuilderSession:
IDLE -> GENERATING -> SUCCEEDED | FAILED, back to IDLE when the next
attempt starts. Only one generation may be in flight per session.
"""
import asyncio
from typing import Callable, Optional

from pydantic import ValidationError

from client.gateway_client import GatewayClient
from client.session import BuilderSession, GenerationState
from logging_config import logger
from services.generation_errors import (
    GenerationError,
    InsufficientCreditsError,
    RateLimitedError,
)
from services.prompt_validator import PromptValidationError, validate_prompt
from services.store_schema import GenerationResult

OUT_OF_CREDITS_MESSAGE = "You're out of credits. They reset tomorrow."
RATE_LIMITED_MESSAGE = "Too many requests. Please wait a moment and try again."
SUCCESS_MESSAGE = "Website generated successfully!"

Notifier = Callable[[str, str], None]


class GenerationInProgressError(RuntimeError):
    """A second submit arrived while the session was still generating"""


def failure_message(error: Exception) -> str:
    """User-facing text for a failed generation"""
    if isinstance(error, InsufficientCreditsError):
        return OUT_OF_CREDITS_MESSAGE
    if isinstance(error, RateLimitedError):
        return RATE_LIMITED_MESSAGE
    detail = getattr(error, "message", None) or str(error)
    return f"Generation failed: {detail}" if detail else "Generation failed"


class GenerationController:
    """Issues generation requests and reconciles results into the session"""

    def __init__(self, gateway: GatewayClient, notify: Optional[Notifier] = None):
        self.gateway = gateway
        self.notify = notify

    def _notify(self, level: str, message: str) -> None:
        if self.notify is None:
            return
        try:
            self.notify(level, message)
        except Exception as e:
            logger.warning("Notification callback failed", error=str(e))

    async def submit(
        self,
        session: BuilderSession,
        prompt: str,
        model: Optional[str] = None
    ) -> GenerationState:
        """
        Run one generation for the session.

        Returns:
            The state the session ended in: IDLE when the prompt was
            rejected locally, otherwise SUCCEEDED or FAILED

        Raises:
            GenerationInProgressError: the session is already generating
        """
        if not session.can_submit:
            raise GenerationInProgressError("A generation is already in progress")

        session.state = GenerationState.IDLE
        session.error = None
        session.hint = None

        try:
            cleaned = validate_prompt(prompt)
        except PromptValidationError as e:
            session.error = str(e)
            logger.info("Prompt rejected locally", failure=e.failure.value)
            return session.state

        session.state = GenerationState.GENERATING
        self._notify("info", "Generating your website...")

        try:
            content = await self.gateway.generate(session.auth_token, cleaned, model or session.model)
            result = GenerationResult.model_validate(content)
        except asyncio.CancelledError:
            # Abandoned mid-flight; the session must accept the next submit
            session.state = GenerationState.IDLE
            logger.info("Generation cancelled")
            raise
        except (GenerationError, ValidationError) as e:
            session.error = failure_message(e)
            session.state = GenerationState.FAILED
            logger.warning("Generation failed", error_type=type(e).__name__, message=session.error)
            self._notify("error", session.error)
        except Exception as e:
            session.error = failure_message(e)
            session.state = GenerationState.FAILED
            logger.error("Unexpected generation failure", error=str(e), exc_info=True)
            self._notify("error", session.error)
        else:
            session.draft.replace(result.store_name, result.products)
            session.customization = result.customization
            session.hint = result.suggestions[0] if result.suggestions else None
            session.state = GenerationState.SUCCEEDED
            logger.info("Store generated", store_name=result.store_name, products=len(result.products))
            self._notify("success", SUCCESS_MESSAGE)
            if session.hint:
                self._notify("info", session.hint)

        await self.refresh_credits(session)
        return session.state

    async def refresh_credits(self, session: BuilderSession) -> Optional[int]:
        """Reload the advisory credit count; failures keep the old value"""
        try:
            session.credits_remaining = await self.gateway.fetch_credits(session.auth_token)
        except (GenerationError, KeyError, TypeError, ValueError) as e:
            logger.warning("Credits refresh failed", error=str(e))
        return session.credits_remaining
