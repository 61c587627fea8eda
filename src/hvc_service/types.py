"""
Core data types for the HVC passenger recovery service
"""

from enum import Enum
from typing import Optional, List, Dict, Union, Literal
from datetime import date, datetime, timezone
from pydantic import BaseModel, Field, computed_field


class Category(str, Enum):
    """HVC passenger categories, highest first"""
    SIGNATURE = "SIGNATURE"
    TOP = "TOP"
    BLACK = "BLACK"
    PLATINUM = "PLATINUM"
    GOLD_PLUS = "GOLD PLUS"
    GOLD = "GOLD"


class FlightStatus(str, Enum):
    """Passenger status on a flight"""
    CONFIRMADO = "CONFIRMADO"
    CHECK_IN = "CHECK-IN"
    BOARDING = "BOARDING"
    EMBARKED = "EMBARKED"


class SatisfactionTier(str, Enum):
    """NPS-style satisfaction tiers"""
    DETRACTOR = "detractor"
    PASSIVE = "passive"
    PROMOTER = "promoter"


class Effectiveness(str, Enum):
    """Expected effectiveness of a recovery suggestion"""
    VERY_HIGH = "very-high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SuggestionType(str, Enum):
    """Source of a recovery suggestion"""
    PERSONALIZED = "personalized"
    CATEGORY_BASED = "category-based"
    INCIDENT_BASED = "incident-based"


class SuggestionCategory(str, Enum):
    """When a recovery suggestion should be applied"""
    IMMEDIATE = "immediate"
    MEDIUM_TERM = "medium-term"
    FOLLOW_UP = "follow-up"


class InsightPriority(str, Enum):
    """Priority of an operational insight"""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DashboardPeriod(str, Enum):
    """Time windows available for airport metrics"""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


# Passenger and Flight Models
class PassengerLikes(BaseModel):
    """Registered passenger preferences"""
    drink: List[str] = Field(default_factory=list)
    food: List[str] = Field(default_factory=list)
    entertainment: List[str] = Field(default_factory=list)
    seat: List[str] = Field(default_factory=list)
    services: List[str] = Field(default_factory=list)
    contact_method: List[str] = Field(default_factory=list)
    other: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in type(self).model_fields)


class PassengerCreate(BaseModel):
    """Passenger to be created in the store"""
    name: str = Field(..., min_length=1, description="Full passenger name")
    document_number: str = Field(..., min_length=1, description="DNI or passport number")
    category: Category
    airport_id: str
    birth_date: Optional[date] = None
    likes: Optional[PassengerLikes] = None


class Passenger(PassengerCreate):
    """Stored passenger"""
    id: str


class PassengerUpdate(BaseModel):
    """Editable passenger fields"""
    name: Optional[str] = None
    category: Optional[Category] = None
    birth_date: Optional[date] = None
    likes: Optional[PassengerLikes] = None


class Flight(BaseModel):
    """Flight operated from an airport on a given date"""
    id: str
    code: str
    destination: str
    date: date
    airport_id: str


class FlightPassenger(BaseModel):
    """Link between a flight and a passenger"""
    flight_id: str
    passenger_id: str
    status: FlightStatus
    seat: Optional[str] = None


# Interaction Models
class InteractionCreate(BaseModel):
    """Agent attention session to be recorded"""
    passenger_id: str
    agent_name: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    score: Optional[int] = Field(None, ge=1, le=10, description="Satisfaction score 1-10")
    feedback: Optional[str] = None
    incident: Optional[str] = None
    recovery_action: Optional[str] = None
    services_used: List[str] = Field(default_factory=list)
    travel_reason: Optional[str] = None
    birthday: bool = False


class Interaction(InteractionCreate):
    """Stored interaction"""
    id: str


# Manifest Models
class ManifestLine(BaseModel):
    """Parsed manifest line, not yet persisted"""
    line_number: int
    flight_code: str
    destination: str
    name: str
    category: Category
    status: FlightStatus
    seat: Optional[str] = None


class ParseResult(BaseModel):
    """Result of parsing a manifest"""
    success: bool
    data: List[ManifestLine] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class MatchedPassenger(BaseModel):
    """Manifest line resolved to an existing passenger"""
    kind: Literal["matched"] = "matched"
    passenger_id: str
    existing_name: str
    existing_document: str


class NewPassenger(BaseModel):
    """Manifest line that needs a new passenger"""
    kind: Literal["new"] = "new"
    record: PassengerCreate


MatchResult = Union[MatchedPassenger, NewPassenger]


class DuplicateEntry(BaseModel):
    """Manifest name that resolved to a passenger already on record"""
    manifest_name: str
    existing_name: str
    existing_document: str


class ProcessingSummary(BaseModel):
    """Outcome of processing a parsed manifest"""
    processed: int = 0
    created: int = 0
    found: int = 0
    links_created: int = 0
    duplicates: List[DuplicateEntry] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def message(self) -> str:
        return f"Processed: {self.processed} | Created: {self.created} | Found: {self.found}"


# Timeline Models
class TimelineEntry(BaseModel):
    """Scored interaction placed on a passenger timeline"""
    interaction_id: Optional[str] = None
    timestamp: datetime
    score: int
    tier: SatisfactionTier
    has_recovery_action: bool
    incident: Optional[str] = None
    agent: str


class RecoveryEvent(BaseModel):
    """Detractor followed by a promoter after a recorded recovery action"""
    detractor: TimelineEntry
    promoter: TimelineEntry
    recovery_action: Optional[str] = None


class PassengerTimeline(BaseModel):
    """Chronological satisfaction view of one passenger"""
    passenger_id: Optional[str] = None
    entries: List[TimelineEntry] = Field(default_factory=list)
    at_risk: bool = False
    recovery_events: List[RecoveryEvent] = Field(default_factory=list)
    detractor_episodes: int = 0

    @computed_field
    @property
    def has_successful_recovery(self) -> bool:
        return len(self.recovery_events) > 0


# Metrics Models
class TrendPoint(BaseModel):
    """Average score for one calendar day"""
    date: date
    average: float
    count: int


class Insight(BaseModel):
    """Advisory message for supervisors"""
    priority: InsightPriority
    title: str
    message: str


class Metrics(BaseModel):
    """Airport-wide operational metrics"""
    total_interactions: int = 0
    total_passengers: int = 0
    scored_interactions: int = 0
    average_score: float = 0.0
    detractors: int = 0
    passives: int = 0
    promoters: int = 0
    nps: int = 0
    passengers_at_risk: int = 0
    successful_recoveries: int = 0
    detractor_episodes: int = 0
    recovery_rate: float = 0.0
    category_distribution: Dict[str, int] = Field(default_factory=dict)
    travel_reason_counts: Dict[str, int] = Field(default_factory=dict)
    services_used_counts: Dict[str, int] = Field(default_factory=dict)
    trend: List[TrendPoint] = Field(default_factory=list)
    insights: List[Insight] = Field(default_factory=list)


# Recommendation Models
class Suggestion(BaseModel):
    """Ranked recovery action for a detractor passenger"""
    title: str
    action: str
    icon: str
    effectiveness: Effectiveness
    type: SuggestionType
    category: SuggestionCategory


class SuggestionUsage(BaseModel):
    title: str
    count: int


class ResponseTimes(BaseModel):
    """Expected service response times for a passenger category"""
    initial_contact: str
    issue_resolution: str
    follow_up: str


class ServiceProtocol(BaseModel):
    """Checklist of actions for a special service situation"""
    key: str
    title: str
    actions: List[str]
    applies_to: List[Category] = Field(default_factory=list)  # empty means every category
    critical: bool = False

    def applies(self, category: Category) -> bool:
        return not self.applies_to or category in self.applies_to


class ChecklistProgress(BaseModel):
    protocol: str
    completed: List[int]
    progress: int


class ProfileRecommendation(BaseModel):
    """Agent-facing note about a passenger profile"""
    type: Literal["danger", "success", "info"]
    icon: str
    title: str
    message: str


# Custom Exceptions
class HVCServiceError(Exception):
    """Base exception for the HVC service"""
    pass


class ValidationError(HVCServiceError):
    """Malformed input such as a bad manifest line or score"""
    pass


class ConflictError(HVCServiceError):
    """Duplicate creation the store could not resolve"""
    pass


class NotFoundError(HVCServiceError):
    """Lookup of an unknown passenger or flight"""
    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class PersistenceError(HVCServiceError):
    """Transport or storage failure in the persistence service"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
