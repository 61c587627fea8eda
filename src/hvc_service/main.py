"""
Main application entry point
"""

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field
import structlog

from .config import config
from .container import container
from .error_handlers import (
    ErrorHandler, ErrorCode, global_exception_handler, http_exception_handler,
    service_exception_handler, validation_exception_handler
)
from .types import (
    Category, ChecklistProgress, DashboardPeriod, Flight, HVCServiceError, Interaction, InteractionCreate,
    Metrics, ParseResult, Passenger, PassengerCreate, PassengerTimeline, PassengerUpdate, ProcessingSummary,
    ProfileRecommendation, ResponseTimes, ServiceProtocol, Suggestion, SuggestionUsage
)
from .utils.dates import period_range, to_utc
from .utils.logger import setup_logging

setup_logging()

logger = structlog.get_logger()


class ManifestParseRequest(BaseModel):
    """Raw manifest text pasted by an agent"""
    text: str


class ManifestProcessRequest(BaseModel):
    """Manifest text plus the flight date and owning airport"""
    text: str
    flight_date: date
    airport_id: str = Field(..., min_length=1)
    strict: bool = False


class ManifestProcessResponse(BaseModel):
    status: str
    message: str
    parse_errors: List[str]
    summary: ProcessingSummary


class AppliedSuggestionResponse(BaseModel):
    title: str
    times_applied: int


class FavoriteRequest(BaseModel):
    title: str = Field(..., min_length=1)


class FavoriteResponse(BaseModel):
    title: str
    favorite: bool


class SuggestionUsageResponse(BaseModel):
    most_used: List[SuggestionUsage]
    today: int


class ChecklistItemUpdate(BaseModel):
    completed: bool


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("Starting HVC Recovery Service", version="1.0.0", backend=container.backend)

    try:
        await container.initialize()
    except Exception as e:
        logger.error("Failed to initialize service container", error=str(e))
        raise

    yield

    logger.info("Shutting down HVC Recovery Service")
    await container.cleanup()


# Create FastAPI application
app = FastAPI(
    title="HVC Recovery Service",
    description="Manifest reconciliation and satisfaction recovery for high-value passengers",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if config.server.debug else None,
    redoc_url="/redoc" if config.server.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if config.is_development else [],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH"],
    allow_headers=["*"],
)

# Add global error handlers
app.add_exception_handler(HVCServiceError, service_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)


@app.get("/health")
async def health_check():
    """
    Health check endpoint

    Reports the persistence backend and which services are wired
    """
    initialized = container.is_initialized()
    return {
        "status": "healthy" if initialized else "unhealthy",
        "timestamp": datetime.now().isoformat(),
        "version": "1.0.0",
        "environment": config.server.environment,
        "backend": container.backend,
        "services": container.list_services() if initialized else {},
    }


# Manifests
@app.post("/api/v1/manifests/parse", response_model=ParseResult)
async def parse_manifest(request: ManifestParseRequest):
    """Validate manifest text without touching the stores"""
    return container.get_manifest_parser().parse(request.text)


@app.post("/api/v1/manifests/process", response_model=ManifestProcessResponse)
async def process_manifest(request: ManifestProcessRequest):
    """
    Parse and apply a manifest.

    Lines that fail to parse are reported and skipped; with strict=true any
    parse error rejects the whole manifest before anything is written.
    """
    parsed = container.get_manifest_parser().parse(request.text)

    if request.strict and parsed.errors:
        raise HTTPException(
            status_code=422,
            detail=ErrorHandler.create_error_response(
                message="The manifest contains invalid lines; nothing was processed.",
                error_code=ErrorCode.INVALID_MANIFEST,
                details={"errors": parsed.errors}
            )
        )

    summary = await container.get_manifest_processor().process(
        parsed.data, request.flight_date, request.airport_id
    )
    return ManifestProcessResponse(
        status="completed" if not summary.errors else "completed_with_errors",
        message=summary.message,
        parse_errors=parsed.errors,
        summary=summary
    )


@app.get("/api/v1/airports/{airport_id}/flights", response_model=List[Flight])
async def list_flights(airport_id: str, flight_date: date):
    return await container.get_flight_repository().list_by_date(flight_date, airport_id)


# Passengers
@app.get("/api/v1/airports/{airport_id}/passengers", response_model=List[Passenger])
async def list_passengers(airport_id: str, q: Optional[str] = None):
    """List an airport's passengers, or search them by name or document"""
    repository = container.get_passenger_repository()
    if q and q.strip():
        return await repository.search(q.strip(), airport_id)
    return await repository.list_by_airport(airport_id)


@app.post("/api/v1/passengers", response_model=Passenger, status_code=201)
async def create_passenger(passenger: PassengerCreate):
    return await container.get_passenger_repository().create(passenger)


@app.get("/api/v1/passengers/{passenger_id}", response_model=Passenger)
async def get_passenger(passenger_id: str):
    return await container.get_passenger_repository().get_by_id(passenger_id)


@app.patch("/api/v1/passengers/{passenger_id}", response_model=Passenger)
async def update_passenger(passenger_id: str, updates: PassengerUpdate):
    """Edit category, birth date or preferences of a passenger"""
    return await container.get_passenger_repository().update(passenger_id, updates)


# Interactions and recovery
@app.post("/api/v1/interactions", response_model=Interaction, status_code=201)
async def record_interaction(interaction: InteractionCreate):
    return await container.get_interaction_recorder().record(interaction)


@app.get("/api/v1/passengers/{passenger_id}/timeline", response_model=PassengerTimeline)
async def passenger_timeline(passenger_id: str):
    await container.get_passenger_repository().get_by_id(passenger_id)
    interactions = await container.get_interaction_repository().list_by_passenger(passenger_id)
    return container.get_timeline_builder().analyze(interactions, passenger_id=passenger_id)


@app.get("/api/v1/passengers/{passenger_id}/suggestions", response_model=List[Suggestion])
async def passenger_suggestions(passenger_id: str):
    """Recovery suggestions for the passenger's latest interaction"""
    passenger = await container.get_passenger_repository().get_by_id(passenger_id)
    interactions = await container.get_interaction_repository().list_by_passenger(passenger_id)
    if not interactions:
        return []

    latest = max(interactions, key=lambda i: to_utc(i.timestamp))
    return container.get_suggestion_engine().suggest(passenger, latest)


@app.post("/api/v1/suggestions/applied", response_model=AppliedSuggestionResponse)
async def apply_suggestion(suggestion: Suggestion):
    """Record that an agent applied a suggestion"""
    times_applied = container.get_suggestion_engine().record_applied(suggestion)
    return AppliedSuggestionResponse(title=suggestion.title, times_applied=times_applied)


@app.get("/api/v1/suggestions/usage", response_model=SuggestionUsageResponse)
async def suggestion_usage(limit: int = 5):
    """Most applied suggestions and today's total"""
    engine = container.get_suggestion_engine()
    return SuggestionUsageResponse(most_used=engine.most_used(limit), today=engine.today_usage())


@app.get("/api/v1/suggestions/favorites", response_model=List[str])
async def list_favorites():
    return container.get_suggestion_engine().favorites()


@app.post("/api/v1/suggestions/favorites", response_model=FavoriteResponse)
async def toggle_favorite(request: FavoriteRequest):
    """Mark a suggestion as favorite, or unmark it if it already is"""
    favorite = container.get_suggestion_engine().toggle_favorite(request.title)
    return FavoriteResponse(title=request.title, favorite=favorite)


# Service standards
@app.get("/api/v1/categories/{category}/response-times", response_model=ResponseTimes)
async def category_response_times(category: Category):
    return container.get_suggestion_engine().response_times(category)


@app.get("/api/v1/protocols/{key}", response_model=ServiceProtocol)
async def service_protocol(key: str):
    return container.get_suggestion_engine().service_protocol(key)


@app.get("/api/v1/protocols/{key}/checklist", response_model=ChecklistProgress)
async def checklist_progress(key: str):
    return container.get_suggestion_engine().checklist_progress(key)


@app.put("/api/v1/protocols/{key}/checklist/{index}", response_model=ChecklistProgress)
async def update_checklist_item(key: str, index: int, update: ChecklistItemUpdate):
    return container.get_suggestion_engine().update_checklist(key, index, update.completed)


@app.get("/api/v1/passengers/{passenger_id}/recommendations", response_model=List[ProfileRecommendation])
async def passenger_recommendations(passenger_id: str):
    passenger = await container.get_passenger_repository().get_by_id(passenger_id)
    interactions = await container.get_interaction_repository().list_by_passenger(passenger_id)
    return container.get_passenger_recommender().recommend(passenger, interactions)


# Dashboard
@app.get("/api/v1/airports/{airport_id}/metrics", response_model=Metrics)
async def airport_metrics(airport_id: str, period: DashboardPeriod = DashboardPeriod.MONTH):
    """Supervisor metrics for one airport over a dashboard period"""
    now = datetime.now().astimezone()
    start, end = period_range(period, now)

    passengers = await container.get_passenger_repository().list_by_airport(airport_id)
    interactions = await container.get_interaction_repository().list_by_airport(airport_id, start, end)
    return container.get_metrics_aggregator().aggregate(interactions, passengers, now=now, airport_id=airport_id)


def main():
    """Main entry point"""
    uvicorn.run(
        "hvc_service.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.is_development,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
