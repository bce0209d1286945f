"""
Customer portal (``/user/...``). Every page requires a signed-in user.
"""

import structlog
from typing import Optional
from urllib.parse import quote
from fastapi import APIRouter, Depends, Form, Query, Request

from freight_web.src.client import ApiClient, ApiError
from freight_web.src.dependencies import get_api_client, get_current_user, get_token
from freight_web.src.pages import redirect, render

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/user", tags=["Portal"])


@router.get("/dashboard")
def dashboard(
    request: Request,
    user: dict = Depends(get_current_user),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    quotes = client.get("/quotes/my", token=token).get("quotes", [])
    shipments = client.get("/shipments", token=token).get("shipments", [])
    return render(
        request,
        "user/dashboard.html",
        quote_count=len(quotes),
        shipment_count=len(shipments),
        recent_quotes=quotes[:5],
        recent_shipments=shipments[:5]
    )


@router.get("/my-quotes")
def my_quotes(
    request: Request,
    user: dict = Depends(get_current_user),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    quotes = client.get("/quotes/my", token=token).get("quotes", [])
    return render(request, "user/my_quotes.html", quotes=quotes)


@router.get("/shipments")
def my_shipments(
    request: Request,
    user: dict = Depends(get_current_user),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    shipments = client.get("/shipments", token=token).get("shipments", [])
    return render(request, "user/shipments.html", shipments=shipments)


@router.get("/tracking")
def tracking(
    request: Request,
    tracking_number: Optional[str] = Query(None, alias="trackingNumber"),
    user: dict = Depends(get_current_user),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    """Own shipments plus, when a tracking number is given, its event timeline."""
    shipments = client.get("/shipments", token=token).get("shipments", [])
    shipment = None
    events = []
    error = None

    tracking_number = (tracking_number or "").strip()
    if tracking_number:
        try:
            shipment = client.get(f"/shipments/{quote(tracking_number, safe='')}", token=token)["shipment"]
            events = client.get(f"/tracking/{shipment['_id']}", token=token).get("events", [])
        except ApiError as e:
            error = e.message

    return render(
        request,
        "user/tracking.html",
        shipments=shipments,
        shipment=shipment,
        events=events,
        tracking_number=tracking_number,
        error=error
    )


@router.get("/profile")
def profile(request: Request, user: dict = Depends(get_current_user)):
    return render(request, "user/profile.html", form=user)


@router.post("/profile")
def update_profile(
    request: Request,
    name: str = Form(""),
    phone: str = Form(""),
    company_name: str = Form("", alias="companyName"),
    address: str = Form(""),
    user: dict = Depends(get_current_user),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    # Blank fields keep their current values on the API side
    form = {"name": name, "phone": phone, "companyName": company_name, "address": address}
    try:
        client.put("/users/profile", json=form, token=token)
    except ApiError as e:
        return render(request, "user/profile.html", status_code=400, form={**user, **form}, error=e.message)
    return redirect("/user/profile", "Profile updated successfully.")


@router.get("/support")
def support(request: Request, user: dict = Depends(get_current_user)):
    form = {"name": user.get("name"), "email": user.get("email"), "phone": user.get("phone")}
    return render(request, "user/support.html", form=form)


@router.post("/support")
def submit_support(
    request: Request,
    phone: str = Form(""),
    subject: str = Form(""),
    message: str = Form(""),
    user: dict = Depends(get_current_user),
    client: ApiClient = Depends(get_api_client)
):
    form = {
        "name": user.get("name"),
        "email": user.get("email"),
        "phone": phone,
        "subject": subject,
        "message": message,
    }
    try:
        client.post("/contact", json=form)
    except ApiError as e:
        return render(request, "user/support.html", status_code=400, form=form, error=e.message)
    return redirect("/user/support", "Support request sent.")
