"""
Admin back-office (``/admin/...``).

Pages list data through the API; forms post back here and are relayed to
the API, then redirect to the page with a flash message. Non-admin users
are sent to the home page by ``require_admin``.
"""

import structlog
from typing import Callable, Optional
from fastapi import APIRouter, Depends, Form, Query, Request

from freight_web.src.client import ApiClient, ApiError
from freight_web.src.dependencies import get_api_client, get_token, require_admin
from freight_web.src.pages import (
    ACTIVE_STATUSES, CONTACT_STATUSES, LOCATION_TYPES, PAYMENT_STATUSES,
    QUOTE_STATUSES, SHIPMENT_STATUSES, TRACKING_STATUSES, compact, redirect, render
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


def relay(call: Callable[[], object], success_url: str, success_message: str):
    """Run an API write and redirect with a success or error flash."""
    try:
        call()
    except ApiError as e:
        logger.info("web_admin_action_failed", target=success_url, error=e.message)
        return redirect(success_url, e.message, level="error")
    return redirect(success_url, success_message)


def as_datetime(value: str) -> str:
    """``<input type=date>`` values become midnight datetimes."""
    value = value.strip()
    if value and "T" not in value:
        return f"{value}T00:00:00"
    return value


# ============================================================================
# DASHBOARD
# ============================================================================


@router.get("/dashboard")
def dashboard(
    request: Request,
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    quotes = client.get("/quotes", token=token).get("quotes", [])
    shipments = client.get("/shipments", token=token).get("shipments", [])
    messages = client.get("/contact", token=token).get("messages", [])
    counts = {
        "quotes": len(quotes),
        "shipments": len(shipments),
        "messages": len(messages),
        "services": len(client.get("/services", params={"showAll": "true"}).get("services", [])),
        "locations": len(client.get("/locations").get("locations", [])),
        "goods": len(client.get("/goods", params={"showAll": "true"}).get("types", [])),
        "containers": len(client.get("/containers", params={"showAll": "true"}).get("types", [])),
    }
    return render(
        request,
        "admin/dashboard.html",
        counts=counts,
        latest_quotes=quotes[:5],
        latest_shipments=shipments[:5],
        latest_messages=messages[:5]
    )


# ============================================================================
# QUOTES
# ============================================================================


@router.get("/quotes")
def quotes_page(
    request: Request,
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    quotes = client.get("/quotes", token=token).get("quotes", [])
    return render(request, "admin/quotes.html", quotes=quotes, statuses=QUOTE_STATUSES)


@router.post("/quotes/{quote_id}")
def update_quote(
    quote_id: str,
    status: str = Form(""),
    final_quote_amount: str = Form("", alias="finalQuoteAmount"),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    body = compact({"status": status, "finalQuoteAmount": final_quote_amount})
    return relay(
        lambda: client.put(f"/quotes/{quote_id}", json=body, token=token),
        "/admin/quotes",
        "Quote updated."
    )


# ============================================================================
# SHIPMENTS
# ============================================================================


def prefill_from_quote(body: dict, quote: Optional[dict]) -> dict:
    """Blank shipment fields take their values from the selected quote."""
    if not quote:
        return body

    def ref(field: str, key: str) -> Optional[str]:
        value = quote.get(field)
        return value.get(key) if isinstance(value, dict) else None

    defaults = {
        "pickupLocation": ref("pickupLocation", "_id"),
        "dropOffLocation": ref("dropLocation", "_id"),
        "goodsType": ref("goodsType", "name"),
        "containerType": ref("containerType", "name"),
        "dimensions": quote.get("dimensions"),
    }
    return {**compact(defaults), **body}


@router.get("/shipments")
def shipments_page(
    request: Request,
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return render(
        request,
        "admin/shipments.html",
        shipments=client.get("/shipments", token=token).get("shipments", []),
        quotes=client.get("/quotes", token=token).get("quotes", []),
        locations=client.get("/locations").get("locations", []),
        goods_types=client.get("/goods", params={"showAll": "true"}).get("types", []),
        container_types=client.get("/containers", params={"showAll": "true"}).get("types", []),
        statuses=SHIPMENT_STATUSES,
        payment_statuses=PAYMENT_STATUSES
    )


@router.post("/shipments")
def create_shipment(
    quote_request_id: str = Form("", alias="quoteRequestId"),
    tracking_number: str = Form("", alias="trackingNumber"),
    pickup_location: str = Form("", alias="pickupLocation"),
    drop_off_location: str = Form("", alias="dropOffLocation"),
    goods_type: str = Form("", alias="goodsType"),
    container_type: str = Form("", alias="containerType"),
    estimated_delivery_date: str = Form("", alias="estimatedDeliveryDate"),
    shipment_notes: str = Form("", alias="shipmentNotes"),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    body = compact({
        "quoteRequestId": quote_request_id,
        "trackingNumber": tracking_number,
        "pickupLocation": pickup_location,
        "dropOffLocation": drop_off_location,
        "goodsType": goods_type,
        "containerType": container_type,
        "estimatedDeliveryDate": as_datetime(estimated_delivery_date),
        "shipmentNotes": shipment_notes,
    })

    if quote_request_id:
        quotes = client.get("/quotes", token=token).get("quotes", [])
        quote = next((q for q in quotes if q.get("_id") == quote_request_id), None)
        body = prefill_from_quote(body, quote)

    return relay(
        lambda: client.post("/shipments", json=body, token=token),
        "/admin/shipments",
        "Shipment created."
    )


@router.post("/shipments/{shipment_id}")
def update_shipment(
    shipment_id: str,
    status: str = Form(""),
    payment_status: str = Form("", alias="paymentStatus"),
    actual_delivery_date: str = Form("", alias="actualDeliveryDate"),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    body = compact({
        "status": status,
        "paymentStatus": payment_status,
        "actualDeliveryDate": as_datetime(actual_delivery_date),
    })
    return relay(
        lambda: client.put(f"/shipments/{shipment_id}", json=body, token=token),
        "/admin/shipments",
        "Status updated."
    )


@router.post("/shipments/{shipment_id}/delete")
def delete_shipment(
    shipment_id: str,
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.delete(f"/shipments/{shipment_id}", token=token),
        "/admin/shipments",
        "Shipment deleted."
    )


# ============================================================================
# TRACKING
# ============================================================================


@router.get("/tracking")
def tracking_page(
    request: Request,
    shipment_id: Optional[str] = Query(None, alias="shipment"),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    shipments = client.get("/shipments", token=token).get("shipments", [])
    events = []
    error = None
    if shipment_id:
        try:
            events = client.get(f"/tracking/{shipment_id}", token=token).get("events", [])
        except ApiError as e:
            error = e.message

    return render(
        request,
        "admin/tracking.html",
        shipments=shipments,
        selected=shipment_id,
        events=events,
        statuses=TRACKING_STATUSES,
        error=error
    )


@router.post("/tracking")
def create_tracking_event(
    shipment: str = Form(""),
    event: str = Form(""),
    location: str = Form(""),
    status: str = Form(""),
    event_time: str = Form("", alias="eventTime"),
    remarks: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    body = compact({
        "shipment": shipment,
        "event": event,
        "location": location,
        "status": status,
        "eventTime": as_datetime(event_time),
        "remarks": remarks,
    })
    target = f"/admin/tracking?shipment={shipment}" if shipment else "/admin/tracking"
    return relay(
        lambda: client.post("/tracking", json=body, token=token),
        target,
        "Tracking event added."
    )


@router.post("/tracking/{event_id}/delete")
def delete_tracking_event(
    event_id: str,
    shipment: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    target = f"/admin/tracking?shipment={shipment}" if shipment else "/admin/tracking"
    return relay(
        lambda: client.delete(f"/tracking/{event_id}", token=token),
        target,
        "Tracking event deleted."
    )


# ============================================================================
# LOCATIONS
# ============================================================================


@router.get("/locations")
def locations_page(request: Request, client: ApiClient = Depends(get_api_client)):
    locations = client.get("/locations").get("locations", [])
    return render(
        request,
        "admin/locations.html",
        locations=locations,
        location_types=LOCATION_TYPES,
        statuses=ACTIVE_STATUSES
    )


@router.post("/locations")
def create_location(
    name: str = Form(""),
    location_type: str = Form("", alias="type"),
    country: str = Form(""),
    city: str = Form(""),
    address: str = Form(""),
    postal_code: str = Form("", alias="postalCode"),
    longitude: str = Form(""),
    latitude: str = Form(""),
    status: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    body = compact({
        "name": name,
        "type": location_type,
        "country": country,
        "city": city,
        "address": address,
        "postalCode": postal_code,
        "status": status,
    })
    if longitude.strip() or latitude.strip():
        body["coordinates"] = [longitude.strip(), latitude.strip()]

    return relay(
        lambda: client.post("/locations", json=body, token=token),
        "/admin/locations",
        "Location created."
    )


@router.post("/locations/{location_id}/status")
def update_location_status(
    location_id: str,
    status: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.put(f"/locations/{location_id}", json={"status": status}, token=token),
        "/admin/locations",
        "Location updated."
    )


@router.post("/locations/{location_id}/delete")
def delete_location(
    location_id: str,
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.delete(f"/locations/{location_id}", token=token),
        "/admin/locations",
        "Location deleted."
    )


# ============================================================================
# CONTAINER TYPES
# ============================================================================


@router.get("/containers")
def containers_page(request: Request, client: ApiClient = Depends(get_api_client)):
    types = client.get("/containers", params={"showAll": "true"}).get("types", [])
    return render(request, "admin/containers.html", types=types, statuses=ACTIVE_STATUSES)


@router.post("/containers")
def create_container(
    name: str = Form(""),
    description: str = Form(""),
    inside_length: str = Form("", alias="insideLength"),
    inside_width: str = Form("", alias="insideWidth"),
    inside_height: str = Form("", alias="insideHeight"),
    door_width: str = Form("", alias="doorWidth"),
    door_height: str = Form("", alias="doorHeight"),
    cbm_capacity: str = Form("", alias="cbmCapacity"),
    tare_weight: str = Form("", alias="tareWeight"),
    max_cargo_weight: str = Form("", alias="maxCargoWeight"),
    status: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    body = compact({
        "name": name,
        "description": description,
        "dimensions": {
            "insideLength": inside_length,
            "insideWidth": inside_width,
            "insideHeight": inside_height,
            "doorWidth": door_width,
            "doorHeight": door_height,
            "cbmCapacity": cbm_capacity,
        },
        "tareWeight": tare_weight,
        "maxCargoWeight": max_cargo_weight,
        "status": status,
    })
    return relay(
        lambda: client.post("/containers", json=body, token=token),
        "/admin/containers",
        "Container type created."
    )


@router.post("/containers/{container_id}/status")
def update_container_status(
    container_id: str,
    status: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.put(f"/containers/{container_id}", json={"status": status}, token=token),
        "/admin/containers",
        "Container type updated."
    )


@router.post("/containers/{container_id}/delete")
def delete_container(
    container_id: str,
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.delete(f"/containers/{container_id}", token=token),
        "/admin/containers",
        "Container type deleted."
    )


# ============================================================================
# GOODS TYPES
# ============================================================================


@router.get("/goods")
def goods_page(request: Request, client: ApiClient = Depends(get_api_client)):
    types = client.get("/goods", params={"showAll": "true"}).get("types", [])
    return render(request, "admin/goods.html", types=types, statuses=ACTIVE_STATUSES)


@router.post("/goods")
def create_goods_type(
    name: str = Form(""),
    description: str = Form(""),
    status: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    body = compact({"name": name, "description": description, "status": status})
    return relay(
        lambda: client.post("/goods", json=body, token=token),
        "/admin/goods",
        "Goods type created."
    )


@router.post("/goods/{goods_id}/status")
def update_goods_status(
    goods_id: str,
    status: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.put(f"/goods/{goods_id}", json={"status": status}, token=token),
        "/admin/goods",
        "Goods type updated."
    )


@router.post("/goods/{goods_id}/delete")
def delete_goods_type(
    goods_id: str,
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.delete(f"/goods/{goods_id}", token=token),
        "/admin/goods",
        "Goods type deleted."
    )


# ============================================================================
# SERVICES
# ============================================================================


@router.get("/services")
def services_page(request: Request, client: ApiClient = Depends(get_api_client)):
    services = client.get("/services", params={"showAll": "true"}).get("services", [])
    return render(request, "admin/services.html", services=services, statuses=ACTIVE_STATUSES)


@router.post("/services")
def create_service(
    name: str = Form(""),
    description: str = Form(""),
    status: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    body = compact({"name": name, "description": description, "status": status})
    return relay(
        lambda: client.post("/services", json=body, token=token),
        "/admin/services",
        "Service created successfully."
    )


@router.post("/services/{service_id}/status")
def update_service_status(
    service_id: str,
    status: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.put(f"/services/{service_id}", json={"status": status}, token=token),
        "/admin/services",
        "Service updated successfully."
    )


@router.post("/services/{service_id}/delete")
def delete_service(
    service_id: str,
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.delete(f"/services/{service_id}", token=token),
        "/admin/services",
        "Service deleted successfully."
    )


# ============================================================================
# SUPPORT INBOX
# ============================================================================


@router.get("/support")
def support_page(
    request: Request,
    status_filter: Optional[str] = Query(None, alias="status"),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    params = {"status": status_filter} if status_filter else None
    messages = client.get("/contact", token=token, params=params).get("messages", [])
    return render(
        request,
        "admin/support.html",
        messages=messages,
        statuses=CONTACT_STATUSES,
        status_filter=status_filter
    )


@router.post("/support/{message_id}/status")
def update_message_status(
    message_id: str,
    status: str = Form(""),
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.put(f"/contact/{message_id}/status", json={"status": status}, token=token),
        "/admin/support",
        "Message status updated."
    )


@router.post("/support/{message_id}/delete")
def delete_message(
    message_id: str,
    token: Optional[str] = Depends(get_token),
    client: ApiClient = Depends(get_api_client)
):
    return relay(
        lambda: client.delete(f"/contact/{message_id}", token=token),
        "/admin/support",
        "Contact message deleted."
    )
