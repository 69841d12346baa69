"""
Health check endpoints.
"""

import logging

from fastapi import APIRouter

from synergie_mail.schemas import HealthResponse, ReadyResponse
from synergie_mail.services.accounts import AccountRegistry
from synergie_mail.services.inbox import InboxService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Services (will be set by main.py)
inbox: InboxService = None
registry: AccountRegistry = None


def set_services(i: InboxService, r: AccountRegistry):
    """Set the service instances for this router."""
    global inbox, registry
    inbox = i
    registry = r


@router.get("/healthz", response_model=HealthResponse)
def healthz():
    """Simple liveness probe."""
    return HealthResponse(status="ok")


@router.get("/readyz", response_model=ReadyResponse)
def readyz():
    """Readiness probe: default account configured, cache state (no IMAP call)."""
    deps = {
        "default_account": registry.get_default_account() is not None,
        "mail_service": registry.get_mail_service() is not None,
    }
    snapshot = inbox.cache.snapshot()

    return ReadyResponse(
        ready=all(deps.values()),
        deps=deps,
        cache={
            "emails": len(snapshot.emails),
            "fresh": snapshot.fresh,
            "lastFetch": snapshot.last_fetch,
        },
    )
