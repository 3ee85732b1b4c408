import logging

from fastapi import APIRouter, Depends, HTTPException

from services.notifier import EmailNotifier, get_notifier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notifications"])


@router.post("/test-email")
def send_test_email(notifier: EmailNotifier = Depends(get_notifier)):
    """Send a synthetic bitcoin alert email to the configured recipient"""
    logger.info("Sending test email...")
    if not notifier.send_test():
        raise HTTPException(500, "Failed to send test email")

    return {
        "success": True,
        "message": "Test email sent successfully!"
    }
