"""REST API endpoint for meal calorie analysis.

POST /api/analyze-food receives ``{"image": "<data URI>"}`` and returns
the model's analysis verbatim, or ``{"error": "..."}`` with status 400
(missing image) or 500 (everything else).
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from calorai.domain.meal.analysis.errors import AnalysisError, UnknownError
from calorai.domain.meal.analysis.models import AnalyzeFoodRequest, ErrorResponse
from calorai.domain.meal.analysis.service import FoodAnalysisService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


def get_analysis_service(request: Request) -> FoodAnalysisService:
    """Analysis service built at app creation."""
    service: FoodAnalysisService = request.app.state.analysis_service
    return service


async def read_image(request: Request) -> Any:
    """Extract the image field from the JSON body.

    An unreadable or non-object body counts as a missing image.
    """
    try:
        payload = await request.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return AnalyzeFoodRequest.model_validate(payload).image


@router.post(
    "/analyze-food",
    responses={
        400: {"model": ErrorResponse, "description": "Image not provided"},
        500: {"model": ErrorResponse, "description": "Configuration or analysis failure"},
    },
)
async def analyze_food(
    request: Request,
    service: FoodAnalysisService = Depends(get_analysis_service),
) -> JSONResponse:
    """Analyze a meal photo and return its calorie breakdown.

    Example:
        ```bash
        curl -X POST http://localhost:8000/api/analyze-food \\
          -H "Content-Type: application/json" \\
          -d '{"image": "data:image/jpeg;base64,/9j/4AAQ..."}'
        ```

        Response:
        ```json
        {
          "foods": [
            {"name": "Arroz", "calories": 200, "portion": "1 xícara", "confidence": "alta"}
          ],
          "totalCalories": 200,
          "notes": ""
        }
        ```
    """
    image = await read_image(request)
    try:
        result = await service.analyze(image)
    except AnalysisError:
        raise
    except Exception as e:
        logger.exception("analysis.unhandled_error")
        raise UnknownError(detail=str(e)) from e

    return JSONResponse(content=result)


async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    """Render any AnalysisError as ``{"error": message}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )
