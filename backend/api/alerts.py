"""
Alerts API
Endpoints for managing price alerts.

Endpoints:
    GET    /api/alerts        → List all alerts
    POST   /api/alerts        → Create alert
    DELETE /api/alerts/{id}   → Delete alert
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from alerts import AlertCondition
from core.config import COINS
from core.errors import AlertNotFound, PersistenceError, StoreUnavailable
from db import AlertStore, get_alert_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/alerts", tags=["Alerts"])


# =============================================================================
# Request Models
# =============================================================================

class CreateAlertRequest(BaseModel):
    """Request body for creating an alert"""
    coin: str
    type: str  # price_above, price_below
    threshold: float = Field(..., gt=0, allow_inf_nan=False)

    model_config = {
        "json_schema_extra": {
            "example": {
                "coin": "bitcoin",
                "type": "price_above",
                "threshold": 50000,
            }
        }
    }


# =============================================================================
# Alert Management
# =============================================================================

@router.get("")
def list_alerts(store: AlertStore = Depends(get_alert_store)):
    """Get all alerts, active and triggered"""
    alerts = store.list()
    logger.info(f"Found {len(alerts)} alerts")

    return {
        "success": True,
        "data": [a.to_dict() for a in alerts]
    }


@router.post("")
def create_alert(request: CreateAlertRequest, store: AlertStore = Depends(get_alert_store)):
    """
    Create a new alert.

    Coins: bitcoin, ethereum, dogecoin, litecoin
    Types: price_above, price_below
    """
    coin = request.coin.strip().lower()
    if coin not in COINS:
        raise HTTPException(400, f"Invalid coin: {request.coin}. Use: {', '.join(COINS)}")

    try:
        condition = AlertCondition(request.type)
    except ValueError:
        raise HTTPException(400, f"Invalid type: {request.type}. Use: price_above, price_below")

    try:
        alert = store.create(coin, condition, request.threshold)
    except (StoreUnavailable, PersistenceError) as e:
        logger.error(f"Error creating alert: {e}")
        raise HTTPException(500, "Failed to save alert to file")

    return {
        "success": True,
        "message": "Alert created successfully",
        "alert": alert.to_dict()
    }


@router.delete("/{alert_id}")
def delete_alert(alert_id: str, store: AlertStore = Depends(get_alert_store)):
    """Delete an alert"""
    try:
        alert_id = int(alert_id)
    except ValueError:
        raise HTTPException(404, "Alert not found")

    try:
        store.delete(alert_id)
    except AlertNotFound:
        raise HTTPException(404, "Alert not found")
    except (StoreUnavailable, PersistenceError) as e:
        logger.error(f"Error deleting alert {alert_id}: {e}")
        raise HTTPException(500, "Failed to save changes to file")

    return {
        "success": True,
        "message": "Alert deleted successfully"
    }
