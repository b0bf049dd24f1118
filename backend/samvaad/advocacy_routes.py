"""Advocacy template catalog endpoints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from .advocacy_templates import (
    AdvocacyTemplate,
    TemplateNotFoundError,
    fill_template,
    get_template,
    list_templates,
    suggest_templates,
    templates_by_category,
)

router = APIRouter(prefix="/api/advocacy/templates", tags=["advocacy"])


class FillTemplateRequest(BaseModel):
    template_id: str = Field(..., min_length=1)
    values: Dict[str, str] = Field(default_factory=dict)


def _template_payload(template: AdvocacyTemplate) -> Dict[str, Any]:
    return template.model_dump(mode="json", exclude={"keywords"})


@router.get("")
def list_advocacy_templates(
    category: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
) -> Dict[str, Any]:
    templates = list_templates()
    if category:
        templates = templates_by_category(category)
    # A search replaces the category filter rather than narrowing it.
    if search:
        templates = suggest_templates(search)
    return {"templates": [_template_payload(template) for template in templates]}


@router.get("/{template_id}")
def read_advocacy_template(template_id: str) -> Dict[str, Any]:
    try:
        template = get_template(template_id)
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found") from exc
    return _template_payload(template)


@router.post("")
def fill_advocacy_template(payload: FillTemplateRequest) -> Dict[str, Any]:
    try:
        template = get_template(payload.template_id)
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found") from exc
    return {
        "template": template.title,
        "content": fill_template(template, payload.values),
        "tips": list(template.tips),
    }


__all__ = ["router"]
