"""
Sender account endpoints (metadata only, never secrets).
"""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from synergie_mail.schemas import ConnectionTestResponse
from synergie_mail.services.accounts import AccountRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/email-accounts", tags=["Accounts"])

# Account registry (will be set by main.py)
registry: AccountRegistry = None


def set_registry(r: AccountRegistry):
    """Set the account registry instance for this router."""
    global registry
    registry = r


@router.get("")
def list_accounts(department: Optional[str] = None):
    if department:
        accounts = registry.get_accounts_by_department(department)
    else:
        accounts = registry.get_active_accounts()

    return {
        "success": True,
        "accounts": [a.public_dict() for a in accounts],
        "stats": registry.get_accounts_stats(),
    }


@router.post("/{account_id}/test-connection", response_model=ConnectionTestResponse)
def test_account_connection(account_id: str):
    if registry.get_account(account_id) is None:
        return JSONResponse(status_code=404, content={"error": "Compte email non trouvé"})

    success = registry.test_account_connection(account_id)
    logger.info("🔌 Test connexion %s : %s", account_id, "OK" if success else "échec")
    return ConnectionTestResponse(success=success)
