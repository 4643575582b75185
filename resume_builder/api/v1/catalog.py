"""
API v1 routes - resume templates and resumes.

Plain CRUD over the catalog repositories; no domain service sits in
between since there are no rules beyond what the schema enforces.
"""

from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException, Response, status

from resume_builder.adapters.repository.catalog import (
    PostgresResumeRepository,
    PostgresTemplateRepository,
)
from resume_builder.api.dependencies import get_resume_repository, get_template_repository
from resume_builder.api.models import (
    ErrorResponse,
    ResumeIn,
    ResumeOut,
    ResumeUpdate,
    TemplateIn,
    TemplateOut,
)
from resume_builder.domain.exceptions import PersistenceError
from resume_builder.domain.models import Resume, Template

router = APIRouter(tags=["catalog"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Not found"}}


def _template_not_found(template_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail=f"Template {template_id} not found"
    )


def _resume_not_found(resume_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Resume {resume_id} not found")


@router.post("/templates", response_model=TemplateOut, status_code=status.HTTP_201_CREATED)
def create_template(
    request_data: TemplateIn,
    repository: PostgresTemplateRepository = Depends(get_template_repository),
) -> TemplateOut:
    template = repository.create(Template(**request_data.model_dump()))
    return TemplateOut.model_validate(template)


@router.get("/templates", response_model=list[TemplateOut])
def list_templates(
    repository: PostgresTemplateRepository = Depends(get_template_repository),
) -> list[TemplateOut]:
    return [TemplateOut.model_validate(t) for t in repository.list()]


@router.get("/templates/{template_id}", response_model=TemplateOut, responses=_NOT_FOUND)
def get_template(
    template_id: int,
    repository: PostgresTemplateRepository = Depends(get_template_repository),
) -> TemplateOut:
    template = repository.get(template_id)
    if template is None:
        raise _template_not_found(template_id)
    return TemplateOut.model_validate(template)


@router.put("/templates/{template_id}", response_model=TemplateOut, responses=_NOT_FOUND)
def update_template(
    template_id: int,
    request_data: TemplateIn,
    repository: PostgresTemplateRepository = Depends(get_template_repository),
) -> TemplateOut:
    template = repository.update(Template(id=template_id, **request_data.model_dump()))
    if template is None:
        raise _template_not_found(template_id)
    return TemplateOut.model_validate(template)


@router.delete(
    "/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_NOT_FOUND
)
def delete_template(
    template_id: int,
    repository: PostgresTemplateRepository = Depends(get_template_repository),
) -> Response:
    """Delete a template and, by cascade, every resume built on it."""
    if not repository.delete(template_id):
        raise _template_not_found(template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/resumes",
    response_model=ResumeOut,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Unknown user or template"}},
)
def create_resume(
    request_data: ResumeIn,
    repository: PostgresResumeRepository = Depends(get_resume_repository),
) -> ResumeOut:
    try:
        resume = repository.create(Resume(**request_data.model_dump()))
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unknown user or template",
        ) from None
    return ResumeOut.model_validate(resume)


@router.get("/resumes", response_model=list[ResumeOut])
def list_resumes(
    user_id: int | None = None,
    repository: PostgresResumeRepository = Depends(get_resume_repository),
) -> list[ResumeOut]:
    return [ResumeOut.model_validate(r) for r in repository.list(user_id)]


@router.get("/resumes/{resume_id}", response_model=ResumeOut, responses=_NOT_FOUND)
def get_resume(
    resume_id: int,
    repository: PostgresResumeRepository = Depends(get_resume_repository),
) -> ResumeOut:
    resume = repository.get(resume_id)
    if resume is None:
        raise _resume_not_found(resume_id)
    return ResumeOut.model_validate(resume)


@router.put(
    "/resumes/{resume_id}",
    response_model=ResumeOut,
    responses={
        **_NOT_FOUND,
        400: {"model": ErrorResponse, "description": "Unknown template"},
        422: {"description": "Validation error, including an attempt to change the owner"},
    },
)
def update_resume(
    resume_id: int,
    request_data: ResumeUpdate,
    repository: PostgresResumeRepository = Depends(get_resume_repository),
) -> ResumeOut:
    """Replace a resume's template, name and content. The owner cannot change."""
    current = repository.get(resume_id)
    if current is None:
        raise _resume_not_found(resume_id)
    try:
        resume = repository.update(replace(current, **request_data.model_dump()))
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unknown template",
        ) from None
    if resume is None:
        raise _resume_not_found(resume_id)
    return ResumeOut.model_validate(resume)


@router.delete("/resumes/{resume_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_NOT_FOUND)
def delete_resume(
    resume_id: int,
    repository: PostgresResumeRepository = Depends(get_resume_repository),
) -> Response:
    if not repository.delete(resume_id):
        raise _resume_not_found(resume_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
