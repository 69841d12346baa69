"""
Email template endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from synergie_mail.schemas import ProcessTemplateRequest
from synergie_mail.services.templates import TemplateService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/email-templates", tags=["Templates"])

# Template service (will be set by main.py)
template_service: TemplateService = None


def set_template_service(t: TemplateService):
    """Set the template service instance for this router."""
    global template_service
    template_service = t


@router.get("")
def list_templates(category: Optional[str] = None):
    templates = template_service.get_all_templates(category)
    return {
        "success": True,
        "templates": [t.to_dict() for t in templates],
        "categories": template_service.get_template_categories(),
    }


@router.post("/process")
def process_template(req: ProcessTemplateRequest):
    """Aperçu d'un template avec les variables fournies."""
    if not req.templateId:
        return JSONResponse(status_code=400, content={"error": "Template ID requis"})

    processed = template_service.process_template(req.templateId, req.variables)
    if processed is None:
        return JSONResponse(status_code=404, content={"error": "Template non trouvé"})

    return {"success": True, **processed.to_dict()}
