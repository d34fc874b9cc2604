import asyncio
import logging
from typing import Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_google_genai import ChatGoogleGenerativeAI

from ziroplans.config import settings
from ziroplans.errors import GenerationError
from ziroplans.schemas.trip_schema import TripRequest
from .itinerary_prompt import build_prompt_inputs, itinerary_prompt

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Model construction (Gemini Flash + Pro fallback)
# ------------------------------------------------------------
def _build_model(model_name: str) -> ChatGoogleGenerativeAI:
    return ChatGoogleGenerativeAI(
        model=model_name,
        temperature=settings.LLM_TEMPERATURE,
        max_output_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
        google_api_key=settings.GOOGLE_API_KEY or None,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        max_retries=settings.LLM_MAX_RETRIES,
        response_mime_type="application/json",
    )


def get_generation_model() -> BaseChatModel:
    """
    Low-temperature, JSON-only Gemini chat model.
    Uses GEMINI_MODEL, with GEMINI_FALLBACK_MODEL if the primary cannot be built.
    """
    try:
        return _build_model(settings.GEMINI_MODEL)
    except Exception as e:
        logger.warning(
            "Model %s unavailable (%s); using %s",
            settings.GEMINI_MODEL, e, settings.GEMINI_FALLBACK_MODEL,
        )
    try:
        return _build_model(settings.GEMINI_FALLBACK_MODEL)
    except Exception as e:
        raise GenerationError("Generation model is not configured", details=str(e)) from e


# ------------------------------------------------------------
# Main Generator Function
# ------------------------------------------------------------
async def generate_itinerary_text(
    request: TripRequest,
    model: Optional[BaseChatModel] = None,
) -> str:
    """
    Send the rendered itinerary prompt to the chat model and return the raw
    completion text. No retry here: the caller decides whether to resubmit.
    The text is NOT trusted to be bare JSON; see planner.plan_validator.
    """
    chain = itinerary_prompt | (model or get_generation_model()) | StrOutputParser()

    try:
        text = await asyncio.wait_for(
            chain.ainvoke(build_prompt_inputs(request)),
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as e:
        logger.error("Generation timed out after %ss", settings.LLM_TIMEOUT_SECONDS)
        raise GenerationError(
            f"Generation service timed out after {settings.LLM_TIMEOUT_SECONDS:g}s"
        ) from e
    except Exception as e:
        logger.error("Generation service call failed: %s", e)
        raise GenerationError("Generation service call failed", details=str(e)) from e

    if not text or not text.strip():
        raise GenerationError("Generation service returned an empty response")

    logger.info("Generation returned %d chars", len(text))
    return text
