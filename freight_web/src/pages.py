"""
Rendering helpers shared by the page routers.

Flash messages travel on the redirect URL (``?flash=...&level=...``) so
the web client stays stateless apart from the auth cookie.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# Option lists mirrored from the API's enums
QUOTE_STATUSES = ["Pending", "Quoted", "Rejected"]
PAYMENT_TERMS = ["Prepaid", "Postpaid", "Third Party"]
SHIPMENT_STATUSES = ["pending", "shipped", "in-transit", "delivered"]
PAYMENT_STATUSES = ["paid", "unpaid", "pending"]
TRACKING_STATUSES = [
    "pending",
    "picked up",
    "in transit",
    "custom clearance",
    "arrived at destination",
    "out for delivery",
    "delivered",
]
CONTACT_STATUSES = ["pending", "reviewed", "resolved"]
LOCATION_TYPES = ["pickup", "drop-off"]
ACTIVE_STATUSES = ["active", "inactive"]


def render(request: Request, template: str, status_code: int = 200, **context: Any):
    context.setdefault("user", getattr(request.state, "user", None))
    return templates.TemplateResponse(request, template, context, status_code=status_code)


def redirect(url: str, flash: Optional[str] = None, level: str = "success") -> RedirectResponse:
    """303 redirect, optionally carrying a flash message."""
    if flash:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{urlencode({'flash': flash, 'level': level})}"
    return RedirectResponse(url, status_code=303)


def compact(values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop blank form values so the API applies its own defaults."""
    result = {}
    for key, value in values.items():
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            continue
        if isinstance(value, dict):
            value = compact(value)
            if not value:
                continue
        result[key] = value
    return result
