"""
Store generation API router
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, Request, Response
from pydantic import BaseModel

from config import settings
from routers.dependencies import get_generation_gateway, limiter
from services.auth_client import extract_bearer_token
from services.generation_gateway import GenerationGateway
from services.store_generator import get_available_models

router = APIRouter()


class GenerateWebsiteRequest(BaseModel):
    """Request model for generating a store"""
    prompt: Any = None
    model: Optional[str] = None


class GenerateWebsiteResponse(BaseModel):
    """Response model for a generated store"""
    success: bool
    content: Dict[str, Any]


class ModelInfo(BaseModel):
    id: str
    name: str
    tier: str


class ModelsResponse(BaseModel):
    success: bool
    default: str
    models: List[ModelInfo]


@router.get("/models", response_model=ModelsResponse)
async def list_models():
    """
    List the language models a store can be generated with.

    Google models are free during the promotion, the others are paid.
    """
    return ModelsResponse(
        success=True,
        default=settings.DEFAULT_MODEL,
        models=[ModelInfo(**m) for m in get_available_models()]
    )


@router.options("/generate-website", include_in_schema=False)
async def generate_website_options():
    """Plain OPTIONS without CORS request headers"""
    return Response(status_code=200)


@router.post("/generate-website", response_model=GenerateWebsiteResponse)
@limiter.limit(settings.GENERATION_RATE_LIMIT)
async def generate_website(
    request: Request,
    data: GenerateWebsiteRequest,
    authorization: Optional[str] = Header(default=None),
    gateway: GenerationGateway = Depends(get_generation_gateway)
):
    """
    Generate store content from a natural-language description.

    This endpoint:
    1. Validates the prompt (10-2000 characters, at least 3 words) and model
    2. Resolves the bearer token to an account
    3. Deducts one credit (first use initialises the account with 10)
    4. Asks the language model for the store JSON and validates it

    Errors are returned as {"error": ..., "details"?: ...} with status
    400, 401, 402, 429 or 500. A credit spent in step 3 is kept even when
    step 4 fails.
    """
    token = extract_bearer_token(authorization)
    result = await gateway.generate(token, data.prompt, data.model)

    return GenerateWebsiteResponse(success=True, content=result.to_wire())
