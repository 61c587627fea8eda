"""
Ranked recovery actions for passengers whose last interaction was a detractor
"""

from datetime import date
from typing import Dict, List, Optional

from ..interfaces.state_store import StateStoreInterface
from ..types import (
    Category, ChecklistProgress, Effectiveness, Interaction, NotFoundError, Passenger, ResponseTimes,
    SatisfactionTier, ServiceProtocol, Suggestion, SuggestionCategory, SuggestionType, SuggestionUsage,
    ValidationError
)
from ..utils.dates import today_local
from ..utils.logger import get_logger
from .interaction_classifier import classify

EFFECTIVENESS_RANK = {
    Effectiveness.VERY_HIGH: 0,
    Effectiveness.HIGH: 1,
    Effectiveness.MEDIUM: 2,
    Effectiveness.LOW: 3,
}

TYPE_RANK = {
    SuggestionType.PERSONALIZED: 0,
    SuggestionType.CATEGORY_BASED: 1,
    SuggestionType.INCIDENT_BASED: 2,
}

ESCALATION_CATEGORIES = {Category.SIGNATURE, Category.TOP, Category.BLACK}

USAGE_NAMESPACE = "applied_suggestions"
FAVORITES_NAMESPACE = "favorite_suggestions"
CHECKLIST_NAMESPACE = "protocol_checklists"


class IncidentTemplates:
    """Keyword-triggered recovery templates, matched against incident text"""

    TEMPLATES = {
        'delay': {
            'keywords': ['delay', 'delayed', 'late', 'retraso', 'demora', 'atraso'],
            'suggestions': [
                ('Lounge access during the wait', 'Escort the passenger to the VIP lounge and keep them updated every 15 minutes', '🛋️', Effectiveness.HIGH, SuggestionCategory.IMMEDIATE),
                ('Delay compensation', 'Offer a meal voucher or miles compensation according to category', '🎟️', Effectiveness.MEDIUM, SuggestionCategory.MEDIUM_TERM),
            ]
        },
        'baggage': {
            'keywords': ['baggage', 'luggage', 'bag', 'suitcase', 'equipaje', 'maleta'],
            'suggestions': [
                ('Priority baggage claim', 'Open a priority claim and hand over an emergency kit', '🧳', Effectiveness.HIGH, SuggestionCategory.IMMEDIATE),
                ('Home delivery follow-up', 'Arrange delivery when the bag is located and call with updates', '📦', Effectiveness.MEDIUM, SuggestionCategory.FOLLOW_UP),
            ]
        },
        'cancellation': {
            'keywords': ['cancel', 'cancelled', 'canceled', 'cancelacion', 'cancelación', 'cancelado'],
            'suggestions': [
                ('Priority rebooking', 'Rebook on the next available flight before the passenger asks', '🔁', Effectiveness.VERY_HIGH, SuggestionCategory.IMMEDIATE),
                ('Accommodation and transport', 'Cover hotel and ground transport if an overnight stay is needed', '🏨', Effectiveness.HIGH, SuggestionCategory.MEDIUM_TERM),
            ]
        },
        'service': {
            'keywords': ['rude', 'attitude', 'service', 'staff', 'servicio', 'atencion', 'atención', 'trato'],
            'suggestions': [
                ('Personal apology', 'Have the shift supervisor apologize in person and own the fix', '🤝', Effectiveness.HIGH, SuggestionCategory.IMMEDIATE),
                ('Service follow-up call', 'Call within 24 hours to confirm the issue was addressed', '📞', Effectiveness.MEDIUM, SuggestionCategory.FOLLOW_UP),
            ]
        },
        'overbooking': {
            'keywords': ['overbooking', 'overbooked', 'sobreventa'],
            'suggestions': [
                ('Upgrade or voluntary rebooking', 'Offer an upgrade on the same flight or a compensated rebooking', '⬆️', Effectiveness.VERY_HIGH, SuggestionCategory.IMMEDIATE),
            ]
        },
        'seat': {
            'keywords': ['seat', 'asiento'],
            'suggestions': [
                ('Seat reassignment', 'Reassign to an equivalent or better seat and note it in the profile', '💺', Effectiveness.HIGH, SuggestionCategory.IMMEDIATE),
            ]
        },
    }

    FALLBACK = ('Acknowledge the incident', 'Acknowledge "{incident}" explicitly and agree on a concrete next step', '📝', Effectiveness.MEDIUM, SuggestionCategory.IMMEDIATE)

    @classmethod
    def for_incident(cls, incident: str) -> List[Suggestion]:
        text = incident.lower()
        suggestions = []
        for template in cls.TEMPLATES.values():
            if any(keyword in text for keyword in template['keywords']):
                suggestions.extend(cls._build(entry, incident) for entry in template['suggestions'])

        if not suggestions:
            suggestions.append(cls._build(cls.FALLBACK, incident))
        return suggestions

    @staticmethod
    def _build(entry, incident: str) -> Suggestion:
        title, action, icon, effectiveness, category = entry
        return Suggestion(
            title=title,
            action=action.format(incident=incident),
            icon=icon,
            effectiveness=effectiveness,
            type=SuggestionType.INCIDENT_BASED,
            category=category
        )


class ServiceStandards:
    """Response-time targets per category and protocols for special service situations"""

    RESPONSE_TIMES = {
        Category.SIGNATURE: ResponseTimes(
            initial_contact="Immediate (< 5 min)", issue_resolution="< 2 hours", follow_up="Within 24 hours"
        ),
        Category.TOP: ResponseTimes(
            initial_contact="< 15 minutes", issue_resolution="< 4 hours", follow_up="Within 48 hours"
        ),
        Category.BLACK: ResponseTimes(
            initial_contact="< 30 minutes", issue_resolution="< 8 hours", follow_up="Within 72 hours"
        ),
    }

    PREMIUM = [Category.SIGNATURE, Category.TOP, Category.BLACK]

    PROTOCOLS = {
        'birthday': ServiceProtocol(
            key='birthday',
            title="Birthday celebration",
            actions=[
                "Personal greeting at boarding",
                "Courtesy upgrade if available",
                "Special dessert or drink",
                "Greeting card signed by the crew",
                "In-flight mention with the passenger's consent",
                "Souvenir photo",
            ],
            applies_to=PREMIUM
        ),
        'first_time': ServiceProtocol(
            key='first_time',
            title="First flight with the airline",
            actions=[
                "Special personalized welcome",
                "Guided tour of available services",
                "Explain the loyalty program",
                "Welcome kit",
                "Extra attention during the flight",
                "Post-flight satisfaction survey",
            ]
        ),
        'frequent_flyer': ServiceProtocol(
            key='frequent_flyer',
            title="Frequent flyer (10+ flights a year)",
            actions=[
                "Personal recognition",
                "Automatic fast track",
                "Seat selection preference",
                "Courtesy drink",
                "Thank them for their loyalty",
                "Surprise additional benefits",
            ],
            applies_to=PREMIUM
        ),
        'special_needs': ServiceProtocol(
            key='special_needs',
            title="Passengers with special needs",
            actions=[
                "Coordinate special assistance before the flight",
                "Ensure accessibility at every step",
                "Assign staff trained in inclusive service",
                "Priority boarding",
                "Continuous follow-up during the trip",
                "Check satisfaction after the flight",
            ],
            critical=True
        ),
    }

    @classmethod
    def response_times(cls, category: Category) -> ResponseTimes:
        """Targets for the category; categories without their own targets use BLACK's"""
        return cls.RESPONSE_TIMES.get(category, cls.RESPONSE_TIMES[Category.BLACK])

    @classmethod
    def protocol(cls, key: str) -> ServiceProtocol:
        protocol = cls.PROTOCOLS.get(key)
        if protocol is None:
            raise NotFoundError("ServiceProtocol", key)
        return protocol


class RecoverySuggestionEngine:
    """Produces ranked recovery suggestions for a detractor passenger"""

    def __init__(self, state_store: Optional[StateStoreInterface] = None):
        self.state_store = state_store
        self.logger = get_logger("recovery_suggestions")

    def suggest(self, passenger: Passenger, last_interaction: Interaction) -> List[Suggestion]:
        if classify(last_interaction.score) != SatisfactionTier.DETRACTOR:
            self.logger.debug("suggestions_skipped", passenger_id=passenger.id, score=last_interaction.score)
            return []

        suggestions = self._personalized(passenger)

        if passenger.category in ESCALATION_CATEGORIES:
            suggestions.append(Suggestion(
                title="Supervisor escalation",
                action=f"{passenger.category.value} passenger: notify the supervisor to lead the recovery in person",
                icon="🚨",
                effectiveness=Effectiveness.HIGH,
                type=SuggestionType.CATEGORY_BASED,
                category=SuggestionCategory.IMMEDIATE
            ))

        incident = (last_interaction.incident or "").strip()
        if incident:
            suggestions.extend(IncidentTemplates.for_incident(incident))

        # Stable sort keeps template order inside equal rank
        suggestions.sort(key=lambda s: (EFFECTIVENESS_RANK[s.effectiveness], TYPE_RANK[s.type]))
        return suggestions

    def record_applied(self, suggestion: Suggestion, today: Optional[date] = None) -> int:
        """Count an applied suggestion; returns its running total"""
        if self.state_store is None:
            return 0
        today = today or today_local()
        self.state_store.increment(self._daily_namespace(today), suggestion.title)
        total = self.state_store.increment(USAGE_NAMESPACE, suggestion.title)
        self.logger.info("suggestion_applied", title=suggestion.title, times_applied=total)
        return total

    def usage_counts(self) -> Dict[str, int]:
        if self.state_store is None:
            return {}
        return self.state_store.counters(USAGE_NAMESPACE)

    def most_used(self, limit: int = 5) -> List[SuggestionUsage]:
        ranked = sorted(self.usage_counts().items(), key=lambda item: (-item[1], item[0]))
        return [SuggestionUsage(title=title, count=count) for title, count in ranked[:limit]]

    def today_usage(self, today: Optional[date] = None) -> int:
        """Suggestions applied on the given business day, across all titles"""
        if self.state_store is None:
            return 0
        return sum(self.state_store.counters(self._daily_namespace(today or today_local())).values())

    # Favorites
    def toggle_favorite(self, title: str) -> bool:
        if self.state_store is None:
            return False
        return self.state_store.toggle_member(FAVORITES_NAMESPACE, title)

    def is_favorite(self, title: str) -> bool:
        return title in self.favorites()

    def favorites(self) -> List[str]:
        if self.state_store is None:
            return []
        return self.state_store.members(FAVORITES_NAMESPACE)

    # Service standards
    def response_times(self, category: Category) -> ResponseTimes:
        return ServiceStandards.response_times(category)

    def service_protocol(self, key: str) -> ServiceProtocol:
        return ServiceStandards.protocol(key)

    def update_checklist(self, key: str, index: int, completed: bool) -> ChecklistProgress:
        """Tick or untick one action of a service protocol"""
        protocol = ServiceStandards.protocol(key)
        if not 0 <= index < len(protocol.actions):
            raise ValidationError(f"Checklist item {index} out of range for protocol '{key}'")
        if self.state_store is not None:
            self.state_store.set_item_state(CHECKLIST_NAMESPACE, key, index, completed)
        return self.checklist_progress(key)

    def checklist_progress(self, key: str) -> ChecklistProgress:
        protocol = ServiceStandards.protocol(key)
        states = self.state_store.item_states(CHECKLIST_NAMESPACE, key) if self.state_store else {}
        completed = sorted(i for i, done in states.items() if done and i < len(protocol.actions))
        progress = round(len(completed) / len(protocol.actions) * 100) if protocol.actions else 0
        return ChecklistProgress(protocol=key, completed=completed, progress=progress)

    @staticmethod
    def _daily_namespace(day: date) -> str:
        return f"{USAGE_NAMESPACE}:{day.isoformat()}"

    @staticmethod
    def _personalized(passenger: Passenger) -> List[Suggestion]:
        likes = passenger.likes
        if likes is None:
            return []

        suggestions = []
        if likes.drink:
            suggestions.append(Suggestion(
                title="Favorite drink",
                action=f"Offer {', '.join(likes.drink)} right away",
                icon="🥤",
                effectiveness=Effectiveness.VERY_HIGH,
                type=SuggestionType.PERSONALIZED,
                category=SuggestionCategory.IMMEDIATE
            ))
        if likes.food:
            suggestions.append(Suggestion(
                title="Favorite food",
                action=f"Arrange {', '.join(likes.food)} in the lounge",
                icon="🍽️",
                effectiveness=Effectiveness.HIGH,
                type=SuggestionType.PERSONALIZED,
                category=SuggestionCategory.IMMEDIATE
            ))
        if likes.entertainment:
            suggestions.append(Suggestion(
                title="Entertainment preference",
                action=f"Provide {', '.join(likes.entertainment)} while they wait",
                icon="🎧",
                effectiveness=Effectiveness.HIGH,
                type=SuggestionType.PERSONALIZED,
                category=SuggestionCategory.MEDIUM_TERM
            ))
        if likes.seat:
            suggestions.append(Suggestion(
                title="Preferred seat",
                action=f"Secure a {', '.join(likes.seat)} seat on this or the next flight",
                icon="💺",
                effectiveness=Effectiveness.VERY_HIGH,
                type=SuggestionType.PERSONALIZED,
                category=SuggestionCategory.MEDIUM_TERM
            ))
        if likes.contact_method:
            suggestions.append(Suggestion(
                title="Follow-up on preferred channel",
                action=f"Follow up via {', '.join(likes.contact_method)} within 24 hours",
                icon="📬",
                effectiveness=Effectiveness.HIGH,
                type=SuggestionType.PERSONALIZED,
                category=SuggestionCategory.FOLLOW_UP
            ))
        return suggestions
