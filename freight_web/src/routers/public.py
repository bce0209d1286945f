"""
Public pages: marketing site, contact form, authentication and quote requests.
"""

import structlog
from typing import Optional
from fastapi import APIRouter, Depends, Form, Request, Response

from freight_web.src.client import ApiClient, ApiError
from freight_web.src.config import get_settings
from freight_web.src.dependencies import (
    get_api_client, get_current_user, get_optional_user, get_token
)
from freight_web.src.pages import PAYMENT_TERMS, compact, redirect, render

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Public"])


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.auth_cookie_max_age_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax"
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=get_settings().auth_cookie_name)


def landing_page(user: dict) -> str:
    return "/admin/dashboard" if user.get("role") == "admin" else "/user/dashboard"


# ============================================================================
# MARKETING
# ============================================================================


@router.get("/")
def home(
    request: Request,
    user: Optional[dict] = Depends(get_optional_user),
    client: ApiClient = Depends(get_api_client)
):
    try:
        services = client.get("/services").get("services", [])
    except ApiError as e:
        logger.warning("web_services_unavailable", error=e.message)
        services = []
    return render(request, "home.html", services=services[:6])


@router.get("/about")
def about(request: Request, user: Optional[dict] = Depends(get_optional_user)):
    return render(request, "about.html")


@router.get("/services")
def services_page(
    request: Request,
    user: Optional[dict] = Depends(get_optional_user),
    client: ApiClient = Depends(get_api_client)
):
    data = client.get("/services")
    return render(
        request,
        "services.html",
        services=data.get("services", []),
        message=data.get("message")
    )


# ============================================================================
# CONTACT
# ============================================================================


@router.get("/contact")
def contact_page(request: Request, user: Optional[dict] = Depends(get_optional_user)):
    return render(request, "contact.html", form={})


@router.post("/contact")
def submit_contact(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    subject: str = Form(""),
    message: str = Form(""),
    user: Optional[dict] = Depends(get_optional_user),
    client: ApiClient = Depends(get_api_client)
):
    form = {"name": name, "email": email, "phone": phone, "subject": subject, "message": message}
    try:
        result = client.post("/contact", json=form)
    except ApiError as e:
        return render(request, "contact.html", status_code=400, form=form, error=e.message)
    return redirect("/contact", result.get("message", "Message sent successfully."))


# ============================================================================
# AUTHENTICATION
# ============================================================================


@router.get("/login")
def login_page(request: Request, user: Optional[dict] = Depends(get_optional_user)):
    if user:
        return redirect(landing_page(user))
    return render(request, "login.html", form={})


@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    client: ApiClient = Depends(get_api_client)
):
    try:
        result = client.post("/users/login", json={"email": email, "password": password})
    except ApiError as e:
        logger.info("web_login_failed", email=email, error=e.message)
        return render(request, "login.html", status_code=400, form={"email": email}, error=e.message)

    response = redirect(landing_page(result["user"]), "Login successful.")
    set_session_cookie(response, result["token"])
    return response


@router.get("/signup")
def signup_page(request: Request, user: Optional[dict] = Depends(get_optional_user)):
    if user:
        return redirect(landing_page(user))
    return render(request, "signup.html", form={})


@router.post("/signup")
def signup(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    phone: str = Form(""),
    company_name: str = Form("", alias="companyName"),
    address: str = Form(""),
    client: ApiClient = Depends(get_api_client)
):
    form = {
        "name": name,
        "email": email,
        "phone": phone,
        "companyName": company_name,
        "address": address,
    }
    try:
        result = client.post("/users/register", json=compact({**form, "password": password}))
    except ApiError as e:
        return render(request, "signup.html", status_code=400, form=form, error=e.message)

    response = redirect(landing_page(result["user"]), "Account created.")
    set_session_cookie(response, result["token"])
    return response


@router.post("/logout")
def logout(
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    if token:
        try:
            client.post("/users/logout", token=token)
        except ApiError as e:
            logger.warning("web_logout_api_failed", error=e.message)

    response = redirect("/", "Logged out successfully.")
    clear_session_cookie(response)
    return response


# ============================================================================
# QUOTE REQUEST
# ============================================================================


def quote_options(client: ApiClient) -> dict:
    """Active pickup/drop-off locations, goods types and container types."""
    locations = [
        loc for loc in client.get("/locations").get("locations", [])
        if loc.get("status") == "active"
    ]
    return {
        "pickup_locations": [loc for loc in locations if loc.get("type") == "pickup"],
        "drop_locations": [loc for loc in locations if loc.get("type") == "drop-off"],
        "goods_types": client.get("/goods").get("types", []),
        "container_types": client.get("/containers").get("types", []),
        "payment_terms": PAYMENT_TERMS,
    }


@router.get("/get-quote")
def get_quote_page(
    request: Request,
    user: dict = Depends(get_current_user),
    client: ApiClient = Depends(get_api_client)
):
    return render(request, "get_quote.html", form={}, **quote_options(client))


@router.post("/get-quote")
def submit_quote(
    request: Request,
    pickup_location: str = Form("", alias="pickupLocation"),
    drop_location: str = Form("", alias="dropLocation"),
    goods_type: str = Form("", alias="goodsType"),
    container_type: str = Form("", alias="containerType"),
    length: str = Form(""),
    width: str = Form(""),
    height: str = Form(""),
    weight: str = Form(""),
    payment_term: str = Form("", alias="paymentTerm"),
    additional_notes: str = Form("", alias="additionalNotes"),
    user: dict = Depends(get_current_user),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    form = {
        "pickupLocation": pickup_location,
        "dropLocation": drop_location,
        "goodsType": goods_type,
        "containerType": container_type,
        "paymentTerm": payment_term,
        "additionalNotes": additional_notes,
        "dimensions": {"length": length, "width": width, "height": height, "weight": weight},
    }
    try:
        client.post("/quotes", json=compact(form), token=token)
    except ApiError as e:
        return render(
            request,
            "get_quote.html",
            status_code=400,
            form=form,
            error=e.message,
            **quote_options(client)
        )

    logger.info("web_quote_submitted", user_id=user.get("_id"))
    return redirect("/user/my-quotes", "Quote submitted successfully!")
