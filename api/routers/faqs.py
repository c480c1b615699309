"""
Admin router for managing FAQ entries.

All endpoints require the X-API-Key header. School and user records are
managed elsewhere; created_by is taken from the request body.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, status

from api.dependencies import get_faq_service, verify_api_key
from api.models.requests import CreateFaqRequest, UpdateFaqRequest
from api.models.responses import DeleteResponse
from core.faq_service import FaqService
from core.schemas import CreateFaqInput, Faq, UpdateFaqInput
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/school/{school_id}", response_model=List[Faq], summary="List FAQs of a school")
def list_school_faqs(
    school_id: int,
    service: Annotated[FaqService, Depends(get_faq_service)],
) -> List[Faq]:
    """All FAQs of a school, including inactive ones, newest first."""
    return service.list_faqs_for_school(school_id)


@router.get("/{faq_id}", response_model=Faq, summary="Get a FAQ")
def get_faq(
    faq_id: int,
    service: Annotated[FaqService, Depends(get_faq_service)],
) -> Faq:
    return service.get_faq(faq_id)


@router.post(
    "/",
    response_model=Faq,
    status_code=status.HTTP_201_CREATED,
    summary="Create a FAQ",
)
def create_faq(
    request: CreateFaqRequest,
    service: Annotated[FaqService, Depends(get_faq_service)],
) -> Faq:
    """Create a FAQ. Keywords are derived from question and answer when not supplied."""
    faq_input = CreateFaqInput(
        school_id=request.school_id,
        category=request.category,
        question=request.question,
        answer=request.answer,
        keywords=request.keywords,
    )
    faq = service.create_faq(faq_input, created_by=request.created_by)
    logger.info(f"FAQ {faq.id} created for school {faq.school_id} by user {request.created_by}")
    return faq


@router.patch("/{faq_id}", response_model=Faq, summary="Update a FAQ")
def update_faq(
    faq_id: int,
    request: UpdateFaqRequest,
    service: Annotated[FaqService, Depends(get_faq_service)],
) -> Faq:
    """Partially update a FAQ; omitted fields keep their stored values."""
    return service.update_faq(
        UpdateFaqInput(id=faq_id, **request.model_dump(exclude_none=True))
    )


@router.delete("/{faq_id}", response_model=DeleteResponse, summary="Delete a FAQ")
def delete_faq(
    faq_id: int,
    service: Annotated[FaqService, Depends(get_faq_service)],
) -> DeleteResponse:
    """Delete a FAQ. success is false when no FAQ had that id."""
    return DeleteResponse(success=service.delete_faq(faq_id))
