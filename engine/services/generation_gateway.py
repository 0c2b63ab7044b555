"""
Generation gateway: validate, authenticate, meter, call the model, parse.

Each request is independent. The only durable side effect is the credit
deduction, which happens before the model is called and is not refunded
if a later step fails.
"""
import time
from typing import Any, Optional

from starlette.concurrency import run_in_threadpool

from config import settings
from logging_config import logger
from services.auth_client import SupabaseAuthClient
from services.credits_ledger import CreditsLedger
from services.generation_errors import GenerationError, InvalidInputError
from services.llm_response_handler import parse_generation_result
from services.prompt_validator import PromptValidationError, validate_prompt
from services.store_generator import SUPPORTED_MODELS, OpenRouterStoreGenerator
from services.store_schema import GenerationResult
from services.store_system_prompt import STORE_SYSTEM_PROMPT


class GenerationGateway:
    """Server-side mediator between the builder and the language model"""

    def __init__(
        self,
        auth_client: SupabaseAuthClient,
        ledger: CreditsLedger,
        generator: OpenRouterStoreGenerator,
        default_model: str = None
    ):
        self.auth_client = auth_client
        self.ledger = ledger
        self.generator = generator
        self.default_model = default_model or settings.DEFAULT_MODEL

    def _validate(self, prompt: Any, model: Optional[str]) -> tuple:
        if not isinstance(prompt, str):
            raise InvalidInputError("Invalid prompt")
        try:
            cleaned = validate_prompt(prompt)
        except PromptValidationError as e:
            raise InvalidInputError(str(e))

        model = model or self.default_model
        if model not in SUPPORTED_MODELS:
            raise InvalidInputError(f"Unsupported model: {model}")
        return cleaned, model

    async def generate(
        self,
        auth_token: Optional[str],
        prompt: Any,
        model: Optional[str] = None
    ) -> GenerationResult:
        """
        Run one generation request end to end.

        Args:
            auth_token: bearer token from the Authorization header
            prompt: store description from the request body
            model: model id from the request body, default model if omitted

        Returns:
            The validated GenerationResult

        Raises:
            GenerationError: any terminal failure, see generation_errors
        """
        start_time = time.time()
        stage = "received"

        try:
            prompt, model = self._validate(prompt, model)
            stage = "validated"

            account_id = await self.auth_client.resolve_token(auth_token)
            stage = "authenticated"

            remaining = await run_in_threadpool(self.ledger.check_and_deduct, account_id)
            stage = "metered"

            logger.info(
                "Generation request metered",
                account_id=account_id,
                model=model,
                remaining_credits=remaining
            )

            content = await self.generator.complete(model, STORE_SYSTEM_PROMPT, prompt)
            stage = "model_called"

            result = parse_generation_result(content)
            stage = "parsed"

        except GenerationError as e:
            logger.warning(
                "Generation failed",
                stage=stage,
                error_type=type(e).__name__,
                status_code=e.status_code,
                error=e.message
            )
            raise

        logger.info(
            "Generation succeeded",
            account_id=account_id,
            model=model,
            store_name=result.store_name,
            products=len(result.products),
            execution_time=round(time.time() - start_time, 3)
        )
        return result
