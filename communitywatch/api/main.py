"""
CommunityWatch - REST API

FastAPI application behind the community-safety reporting app: accounts,
incident reports, today's ranked activity feed, location search and the
report heat map.

Run with: uvicorn communitywatch.api.main:app --reload
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from communitywatch.accounts import User, UserStore
from communitywatch.core.config import settings
from communitywatch.core.constants import ALERT_MESSAGES, MAX_DESCRIPTION_LENGTH
from communitywatch.core.date_utils import get_formatted_date
from communitywatch.core.geo_utils import Coordinates
from communitywatch.core.logging import setup_logging
from communitywatch.crowdsource import Report, ReportStore, ValidationError, submit_feedback
from communitywatch.ingestion import (
    GeocodingError,
    NominatimClient,
    QueryLocationProvider,
    get_current_position,
    try_get_position,
)
from communitywatch.services import (
    AuthenticationError,
    DocumentNotFoundError,
    FirebaseService,
    FirebaseServiceError,
)
from communitywatch.visualization import MapState, MapStore, create_heat_map

setup_logging()
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# FastAPI app
app = FastAPI(
    title="CommunityWatch",
    description="Community safety reporting API: incident reports, nearby activity feed and heat maps",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    modules: dict


class SignUpRequest(BaseModel):
    """New account form."""
    first_name: str
    last_name: str
    email: str
    password: str
    confirm_password: Optional[str] = None


class SignInRequest(BaseModel):
    email: str
    password: str


class UserRequest(BaseModel):
    user_id: str


class VerifyEmailRequest(BaseModel):
    user_id: str
    id_token: str


class UserResponse(BaseModel):
    """User profile."""
    id: str
    first_name: str
    last_name: str
    email: str
    trust_points: int
    verified: bool
    date_joined: str
    locations: List[str]


class SessionResponse(BaseModel):
    """Signed-in session."""
    uid: str
    id_token: str
    refresh_token: str
    expires_in: int
    user: UserResponse


class LocationsRequest(BaseModel):
    locations: List[str] = Field(..., min_length=1)


class ReportCreateRequest(BaseModel):
    """Request to create an incident report."""
    user_id: str
    report_type: str = Field(..., description="Crime, Suspicious Activity or Be Alert")
    location: str
    description: str = Field(..., max_length=MAX_DESCRIPTION_LENGTH)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ReportResponse(BaseModel):
    """Incident report."""
    id: Optional[str]
    user_id: str
    name: str
    report_type: str
    description: str
    location: str
    date: str
    time: str
    display_time: str
    latitude: float
    longitude: float
    icon: str
    color: str


class ReportListResponse(BaseModel):
    """Ranked list of reports."""
    count: int
    date: str
    error: Optional[str] = None
    reports: List[ReportResponse]


class LocationSuggestionResponse(BaseModel):
    name: str
    full_address: str
    latitude: Optional[float]
    longitude: Optional[float]


class ReverseGeocodeResponse(BaseModel):
    latitude: float
    longitude: float
    location: str


class MapStateRequest(BaseModel):
    user_id: str
    map_state: str


class PinRequest(BaseModel):
    user_id: str
    latitude: float
    longitude: float


class MapStateResponse(BaseModel):
    map_state: str
    pin: Dict[str, float]


class FeedbackRequest(BaseModel):
    user_id: str
    feedback: str


class FeedbackResponse(BaseModel):
    id: str


# ============================================================================
# Helper Functions
# ============================================================================

# Global instances for stateful services
_firebase: Optional[FirebaseService] = None
_geocoder: Optional[NominatimClient] = None
_map_stores: Dict[str, MapStore] = {}


def get_firebase() -> FirebaseService:
    """Get the shared Firebase service."""
    global _firebase
    if _firebase is None:
        _firebase = FirebaseService()
    return _firebase


def get_geocoder() -> NominatimClient:
    """Get the shared Nominatim client."""
    global _geocoder
    if _geocoder is None:
        _geocoder = NominatimClient()
    return _geocoder


def get_map_store(user_id: str) -> MapStore:
    """
    Map mode is per user and lives only in this process.

    Only call for users known to exist; entries are dropped on sign-out.
    """
    if user_id not in _map_stores:
        _map_stores[user_id] = MapStore()
    return _map_stores[user_id]


def load_user(user_id: str) -> UserStore:
    """User store with the profile loaded, or a 404."""
    store = UserStore(get_firebase())
    try:
        store.get_user(user_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except FirebaseServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return store


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        trust_points=user.trust_points,
        verified=user.verified,
        date_joined=user.date_joined,
        locations=user.locations,
    )


def report_response(report: Report) -> ReportResponse:
    data = report.to_dict()
    return ReportResponse(
        id=report.id,
        user_id=report.user_id,
        name=report.name,
        report_type=report.report_type,
        description=report.description,
        location=report.location,
        date=report.date,
        time=report.time,
        display_time=data["displayTime"],
        latitude=report.coords.lat,
        longitude=report.coords.lng,
        icon=data["icon"],
        color=data["color"],
    )


# ============================================================================
# System Routes
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health status and configuration."""
    modules = {
        "firebase": bool(settings.firebase_credentials_path or settings.firebase_project_id),
        "firebase_auth_rest": bool(settings.firebase_web_api_key),
        "geocoding": True,
        "maps": True,
    }

    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=datetime.utcnow().isoformat(),
        modules=modules,
    )


# ============================================================================
# Auth Routes
# ============================================================================

@app.post("/api/v1/auth/signup", response_model=UserResponse, tags=["Auth"])
async def sign_up(request: SignUpRequest):
    """Create an account and its profile."""
    store = UserStore(get_firebase())
    details = {
        "firstName": request.first_name,
        "lastName": request.last_name,
        "email": request.email,
    }
    try:
        user = store.sign_up(details, request.password, request.confirm_password)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthenticationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FirebaseServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return user_response(user)


@app.post("/api/v1/auth/signin", response_model=SessionResponse, tags=["Auth"])
async def sign_in(request: SignInRequest):
    """Sign in with e-mail and password."""
    store = UserStore(get_firebase())
    try:
        user = store.sign_in(request.email, request.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="User profile not found")
    except FirebaseServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    session = store.session
    return SessionResponse(
        uid=session.uid,
        id_token=session.id_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        user=user_response(user),
    )


@app.post("/api/v1/auth/signout", tags=["Auth"])
async def sign_out(request: UserRequest):
    """Revoke the user's sessions."""
    store = load_user(request.user_id)
    try:
        store.sign_out()
    except FirebaseServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    _map_stores.pop(request.user_id, None)
    return {"status": "signed_out"}


@app.delete("/api/v1/auth/account", tags=["Auth"])
async def delete_account(user_id: str = Query(...)):
    """Delete the account and profile."""
    store = load_user(user_id)
    try:
        store.delete_account()
    except FirebaseServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    _map_stores.pop(user_id, None)
    return {"status": "deleted"}


@app.post("/api/v1/auth/verify-email", tags=["Auth"])
async def verify_email(request: VerifyEmailRequest):
    """Send a verification e-mail."""
    store = load_user(request.user_id)
    try:
        store.send_email_verification(request.id_token)
    except FirebaseServiceError as e:
        logger.error(f"Verification e-mail failed for {request.user_id}: {e}")
        raise HTTPException(status_code=502, detail=ALERT_MESSAGES["generic_error"])
    return {"message": ALERT_MESSAGES["verification_sent"]}


# ============================================================================
# User Routes
# ============================================================================

@app.get("/api/v1/users/{user_id}", response_model=UserResponse, tags=["Users"])
async def get_user(user_id: str):
    """Get a profile, syncing its verification flag first."""
    store = load_user(user_id)
    try:
        store.refresh_verification()
    except FirebaseServiceError as e:
        logger.warning(f"Could not refresh verification for {user_id}: {e}")
    return user_response(store.user)


@app.post("/api/v1/users/{user_id}/locations", response_model=UserResponse, tags=["Users"])
async def add_locations(user_id: str, request: LocationsRequest):
    """Subscribe to location labels."""
    store = load_user(user_id)
    try:
        store.add_location(request.locations)
    except FirebaseServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return user_response(store.user)


@app.delete("/api/v1/users/{user_id}/locations", response_model=UserResponse, tags=["Users"])
async def remove_location(user_id: str, location: str = Query(..., description="Location label")):
    """Unsubscribe from a location label."""
    store = load_user(user_id)
    try:
        store.remove_location(location)
    except FirebaseServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return user_response(store.user)


# ============================================================================
# Report Routes
# ============================================================================

@app.post("/api/v1/reports", response_model=ReportResponse, tags=["Reports"])
async def create_report(request: ReportCreateRequest):
    """
    Submit an incident report.

    The report is stamped with today's date and the current time. Afterwards
    the reporter's map switches back to the heat map.
    """
    user_store = load_user(request.user_id)
    report_store = ReportStore(get_firebase())

    try:
        report = report_store.create_report(
            user=user_store.user,
            report_type=request.report_type,
            location=request.location,
            description=request.description,
            coords=Coordinates(lat=request.latitude, lng=request.longitude),
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FirebaseServiceError as e:
        logger.error(f"Report submission failed for {request.user_id}: {e}")
        raise HTTPException(status_code=502, detail=ALERT_MESSAGES["report_failed"])

    map_store = _map_stores.get(request.user_id)
    if map_store is not None:
        map_store.set_map_state(MapState.HEAT_MAP)
    return report_response(report)


@app.get("/api/v1/reports/today", response_model=ReportListResponse, tags=["Reports"])
async def list_todays_reports(
    latitude: Optional[float] = Query(None, ge=-90, le=90, description="User latitude"),
    longitude: Optional[float] = Query(None, ge=-180, le=180, description="User longitude"),
    locations: Optional[List[str]] = Query(None, description="Only these location labels"),
    user_id: Optional[str] = Query(None, description="Use this user's subscribed locations"),
    q: Optional[str] = Query(None, description="Free-text search"),
    limit: int = Query(default=100, ge=1, le=500),
):
    """
    Today's reports ranked by recency and proximity.

    Without a position the feed is ranked by recency only. A failed read
    returns an empty list with an ``error`` message.
    """
    if not locations and user_id:
        locations = load_user(user_id).locations or None

    coords = try_get_position(QueryLocationProvider(latitude, longitude))
    date = get_formatted_date()

    store = ReportStore(get_firebase())
    store.get_reports(settings.reports_collection, date, coords, locations)
    reports = store.search(q or "")[:limit]

    return ReportListResponse(
        count=len(reports),
        date=date,
        error=store.error,
        reports=[report_response(r) for r in reports],
    )


# ============================================================================
# Location Routes
# ============================================================================

@app.get("/api/v1/locations/search", response_model=List[LocationSuggestionResponse], tags=["Locations"])
async def search_locations(q: str = Query(..., description="Suburb or place name")):
    """Suggest location labels for a search query."""
    try:
        suggestions = get_geocoder().search(q)
    except GeocodingError as e:
        raise HTTPException(status_code=502, detail=str(e) or ALERT_MESSAGES["locations_failed"])

    return [LocationSuggestionResponse(**s.to_dict()) for s in suggestions]


@app.get("/api/v1/locations/reverse", response_model=ReverseGeocodeResponse, tags=["Locations"])
async def reverse_geocode(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
):
    """Best-effort location label for a position."""
    try:
        label = get_geocoder().reverse_geocode(latitude, longitude)
    except GeocodingError as e:
        raise HTTPException(status_code=502, detail=str(e) or ALERT_MESSAGES["locations_failed"])

    return ReverseGeocodeResponse(latitude=latitude, longitude=longitude, location=label)


# ============================================================================
# Map Routes
# ============================================================================

@app.get("/api/v1/map/state", response_model=MapStateResponse, tags=["Map"])
async def get_map_state(user_id: str = Query(...)):
    """Current map mode and pin; users without a stored mode see the default."""
    store = _map_stores.get(user_id) or MapStore()
    return MapStateResponse(**store.to_dict())


@app.put("/api/v1/map/state", response_model=MapStateResponse, tags=["Map"])
async def set_map_state(request: MapStateRequest):
    """Switch between heat map and pin placement. Unknown modes show the heat map."""
    load_user(request.user_id)
    store = get_map_store(request.user_id)
    store.set_map_state(request.map_state)
    return MapStateResponse(**store.to_dict())


@app.put("/api/v1/map/pin", response_model=MapStateResponse, tags=["Map"])
async def set_pin(request: PinRequest):
    """Place the pin for a new report."""
    load_user(request.user_id)
    store = get_map_store(request.user_id)
    store.set_pin(request.latitude, request.longitude)
    return MapStateResponse(**store.to_dict())


@app.get("/api/v1/map/heatmap", response_class=HTMLResponse, tags=["Map"])
async def get_heat_map(
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    user_id: Optional[str] = Query(None, description="Draw this user's pin when in pin mode"),
):
    """
    Interactive heat map of today's reports.

    Centered on the user's position when shared; otherwise on the reports.
    """
    store = ReportStore(get_firebase())
    store.get_reports(settings.reports_collection, get_formatted_date())

    center = None
    if latitude is not None and longitude is not None:
        center = get_current_position(QueryLocationProvider(latitude, longitude)).to_tuple()

    pin = None
    if user_id:
        map_store = _map_stores.get(user_id)
        if map_store is not None and map_store.map_state == MapState.PIN:
            pin = map_store.fetch_pin()

    try:
        report_map = create_heat_map(store.reports, center=center, pin=pin)
        return report_map._repr_html_()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# Feedback Routes
# ============================================================================

@app.post("/api/v1/feedback", response_model=FeedbackResponse, tags=["Feedback"])
async def post_feedback(request: FeedbackRequest):
    """Send feedback about the app."""
    user_store = load_user(request.user_id)
    try:
        feedback_id = submit_feedback(get_firebase(), user_store.user, request.feedback)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FirebaseServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return FeedbackResponse(id=feedback_id)


# ============================================================================
# Main
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
