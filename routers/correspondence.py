# routers/correspondence.py
"""
Correspondence API routes.

Templates hold {{token}} placeholders; /generate fills them in for one
tenant and stores the result as a draft.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_user_id
from models import Correspondence, CorrespondenceStatus, CorrespondenceTemplate
from schemas.common import DataResponse
from schemas.correspondence import (
     CorrespondenceResponse,
     CorrespondenceStatusEnum,
     GenerateCorrespondenceRequest,
     TemplateCreate,
     TemplateRef,
     TemplateResponse,
     TemplateUpdate,
)
from services.correspondence_service import CorrespondenceService

router = APIRouter(prefix="/api/correspondence", tags=["correspondence"])


def _build_correspondence_response(
     correspondence: Correspondence,
     template: Optional[CorrespondenceTemplate] = None
) -> CorrespondenceResponse:
     response = CorrespondenceResponse.model_validate(correspondence)
     template = template or correspondence.template
     if template is not None:
          response.original_template = TemplateRef.model_validate(template)
     return response


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

@router.get("/templates", response_model=DataResponse[List[TemplateResponse]])
def list_templates(
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     templates = CorrespondenceService.list_templates(db, user_id)
     return DataResponse(data=[TemplateResponse.model_validate(t) for t in templates])


@router.post("/templates", response_model=DataResponse[TemplateResponse], status_code=status.HTTP_201_CREATED)
def create_template(
     template_data: TemplateCreate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     """**variables** defaults to the tokens found in the subject and content."""
     template = CorrespondenceService.create_template(db, user_id, template_data)
     return DataResponse(data=TemplateResponse.model_validate(template))


@router.get("/templates/{template_id}", response_model=DataResponse[TemplateResponse])
def get_template(
     template_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     template = CorrespondenceService.get_template(db, user_id, template_id)
     return DataResponse(data=TemplateResponse.model_validate(template))


@router.put("/templates/{template_id}", response_model=DataResponse[TemplateResponse])
def update_template(
     template_id: int,
     template_data: TemplateUpdate,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     template = CorrespondenceService.update_template(db, user_id, template_id, template_data)
     return DataResponse(data=TemplateResponse.model_validate(template))


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
     template_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     CorrespondenceService.delete_template(db, user_id, template_id)
     return None


# ---------------------------------------------------------------------------
# Correspondence
# ---------------------------------------------------------------------------

@router.get("", response_model=DataResponse[List[CorrespondenceResponse]])
def list_correspondence(
     tenant_id: Optional[int] = Query(None, description="Filter by tenant ID"),
     status_filter: Optional[CorrespondenceStatusEnum] = Query(None, alias="status"),
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     items = CorrespondenceService.list_correspondence(
          db,
          user_id,
          tenant_id=tenant_id,
          status=CorrespondenceStatus(status_filter.value) if status_filter else None,
     )
     return DataResponse(data=[_build_correspondence_response(c) for c in items])


@router.post(
     "/generate",
     response_model=DataResponse[CorrespondenceResponse],
     status_code=status.HTTP_201_CREATED,
     summary="Generate a draft from a template"
)
def generate_correspondence(
     request: GenerateCorrespondenceRequest,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     """
     Substitute **variables** into the template for one tenant.

     Tenant details are filled in automatically; unknown tokens stay as typed.
     """
     correspondence, template = CorrespondenceService.generate(
          db, user_id, request.template_id, request.tenant_id, request.variables
     )
     return DataResponse(data=_build_correspondence_response(correspondence, template))


@router.get("/{correspondence_id}", response_model=DataResponse[CorrespondenceResponse])
def get_correspondence(
     correspondence_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     correspondence = CorrespondenceService.get_correspondence(db, user_id, correspondence_id)
     return DataResponse(data=_build_correspondence_response(correspondence))


@router.patch("/{correspondence_id}/send", response_model=DataResponse[CorrespondenceResponse])
def send_correspondence(
     correspondence_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     correspondence = CorrespondenceService.mark_sent(db, user_id, correspondence_id)
     return DataResponse(data=_build_correspondence_response(correspondence))


@router.delete("/{correspondence_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_correspondence(
     correspondence_id: int,
     db: Session = Depends(get_session),
     user_id: int = Depends(get_current_user_id)
):
     CorrespondenceService.delete_correspondence(db, user_id, correspondence_id)
     return None
