"""Question answering API routes.

Endpoints:
- POST /api/ask-question - Answer a question about the configured datasets
"""

import structlog
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from data_chat.api.dependencies import QuestionServiceDep
from data_chat.api.models import schemas
from data_chat.core.question_service import EmptyQuestionError, UnknownDatasetError

logger = structlog.get_logger()

router = APIRouter()

PROCESSING_ERROR = "Failed to process the question"


# ============================================================================
# POST /api/ask-question - Answer Question
# ============================================================================


@router.post(
    "/ask-question",
    response_model=schemas.AskQuestionResponse,
    responses={500: {"model": schemas.ErrorResponse}},
)
def ask_question(
    request: schemas.AskQuestionRequest,
    service: QuestionServiceDep,
) -> schemas.AskQuestionResponse | JSONResponse:
    """Answer a natural language question.

    Questions needing exact figures (averages, totals, breakdowns) are computed
    locally over every row of each selected dataset before the model phrases
    the answer; other questions are answered from the profile and a data sample.

    Args:
        request: Question, optional session id and dataset selection
        service: Question service (injected)

    Returns:
        AskQuestionResponse: Answer, session id, cache flag and per-dataset analyses

    Raises:
        HTTPException: 422 if the question is blank, 404 if a dataset is unknown

    Example:
        POST /api/ask-question
        {"question": "What is the average score by vertical?"}

        Response (200):
        {
            "answer": "...",
            "session_id": "sess_a1b2c3d4e5f6a7b8",
            "cached": false,
            "analyses": [{"dataset_id": "h1_2025", "intent": {...}, "result": {...}}, ...]
        }
    """
    try:
        result = service.ask(
            request.question,
            session_id=request.session_id,
            dataset_ids=request.dataset_ids,
        )
    except EmptyQuestionError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except UnknownDatasetError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e.args[0])) from e
    except Exception:
        logger.exception("ask_question_failed", session_id=request.session_id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": PROCESSING_ERROR},
        )

    return schemas.AskQuestionResponse(
        answer=result.answer,
        session_id=result.session_id,
        cached=result.cached,
        analyses=result.analyses,
    )
