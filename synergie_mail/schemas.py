"""
Pydantic models for the Synergie Mail API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

from synergie_mail.models import DIRECTIONS


# ---------------------------------------------------------------------------
# Emails
# ---------------------------------------------------------------------------

class SendEmailRequest(BaseModel):
    """Request to send an email (directly or from a template)."""
    # Optionnels ici : les manques sont signalés en 400, pas en 422
    to: Optional[str] = None
    subject: Optional[str] = None
    htmlContent: Optional[str] = None
    textContent: Optional[str] = None
    accountId: Optional[str] = None
    templateId: Optional[str] = None
    variables: Optional[Dict[str, Any]] = None
    cc: Optional[List[str]] = None
    bcc: Optional[List[str]] = None


class UpdateEmailRequest(BaseModel):
    """Local update of a cached email (unknown keys are ignored, id is immutable)."""
    subject: Optional[str] = None
    fromEmail: Optional[str] = None
    fromName: Optional[str] = None
    toEmail: Optional[str] = None
    toName: Optional[str] = None
    direction: Optional[str] = None
    status: Optional[str] = None
    createdAt: Optional[str] = None
    htmlContent: Optional[str] = None
    textContent: Optional[str] = None
    images: Optional[List[str]] = None
    isRead: Optional[bool] = None
    isStarred: Optional[bool] = None
    isImportant: Optional[bool] = None

    @field_validator("*")
    @classmethod
    def reject_null(cls, value):
        # Champ absent = inchangé ; null explicite refusé
        if value is None:
            raise ValueError("valeur null non autorisée")
        return value

    @field_validator("direction")
    @classmethod
    def check_direction(cls, value):
        if value not in DIRECTIONS:
            raise ValueError(f"direction inconnue : {value}")
        return value


class SendEmailResponse(BaseModel):
    success: bool
    messageId: str
    note: str
    status: str
    error: Optional[str] = None


class RefreshResponse(BaseModel):
    success: bool
    message: str
    emailCount: int
    lastUpdate: str
    status: str


class ConnectionTestResponse(BaseModel):
    success: bool


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

class ProcessTemplateRequest(BaseModel):
    """Request to render a template with variables."""
    templateId: Optional[str] = None
    variables: Dict[str, Any] = {}


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    """Simple health check response."""
    status: str


class ReadyResponse(BaseModel):
    """Readiness check with cache state."""
    ready: bool
    deps: Dict[str, Any]
    cache: Dict[str, Any]
