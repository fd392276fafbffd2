from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_assessor
from config import settings
from models.requests import CompatibilityRequest, SanitizeRequest
from models.responses import HealthResponse
from models.schemas.assessment import CompatibilityAssessment, ValidationErrorResult
from models.schemas.sanitization import SanitizationResult
from services.compatibility_assessor import CompatibilityAssessor
from services.errors import AssessmentUnavailableError, AssessmentValidationError
from services.sanitization import sanitize_resume

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health", response_model=HealthResponse)
async def health(assessor: CompatibilityAssessor = Depends(get_assessor)):
    provider = assessor.similarity.provider
    return HealthResponse(
        status="ok",
        embedding_provider=provider.name if provider else settings.embedding_provider,
        similarity_configured=provider is not None,
    )


@router.post(
    "/compatibility",
    response_model=CompatibilityAssessment,
    responses={422: {"model": ValidationErrorResult}, 503: {"description": "Similarity required but unavailable"}},
)
@limiter.limit("30/minute")
async def compatibility(
    request: Request,
    body: CompatibilityRequest,
    assessor: CompatibilityAssessor = Depends(get_assessor),
):
    try:
        return await assessor.assess(body.resume, body.job)
    except AssessmentValidationError as e:
        return JSONResponse(status_code=422, content=e.result.model_dump())
    except AssessmentUnavailableError as e:
        return JSONResponse(status_code=503, content={"detail": str(e)})


@router.post("/sanitize", response_model=SanitizationResult)
@limiter.limit("30/minute")
async def sanitize(request: Request, body: SanitizeRequest):
    return sanitize_resume(body.resume)
