from fastapi import APIRouter, Depends

from alerts import AlertEvaluator, get_alert_evaluator
from core.config import COINS
from db import AlertStore, get_alert_store

router = APIRouter(tags=["Stats"])


@router.get("/stats")
def get_stats(
    store: AlertStore = Depends(get_alert_store),
    evaluator: AlertEvaluator = Depends(get_alert_evaluator),
):
    # alertsSent counts trigger emails delivered since process start
    return {
        "success": True,
        "data": {
            "monitoredCoins": len(COINS),
            "activeAlerts": store.count_active(),
            "alertsSent": evaluator.notifications_sent,
        }
    }
