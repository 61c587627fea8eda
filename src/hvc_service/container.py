"""
Dependency injection container for HVC service components
"""

from typing import Any, Dict, Optional

import structlog

from .config import config
from .clients import (
    InMemoryFlightRepository, InMemoryInteractionRepository, InMemoryPassengerRepository,
    InMemoryStateStore, SupabaseClient, SupabaseFlightRepository,
    SupabaseInteractionRepository, SupabasePassengerRepository
)
from .interfaces import (
    FlightRepositoryInterface, InteractionRepositoryInterface, PassengerRepositoryInterface
)
from .services import (
    InteractionRecorder, ManifestParser, ManifestProcessor, MetricsAggregator,
    NamePassengerMatcher, PassengerRecommender, RecoverySuggestionEngine, RecoveryTimelineBuilder
)

logger = structlog.get_logger()


class ServiceContainer:
    """
    Wires repositories and engine services for the configured persistence backend
    """

    def __init__(self, backend: Optional[str] = None):
        self.backend = backend or config.persistence.backend
        self._services: Dict[str, Any] = {}
        self._supabase: Optional[SupabaseClient] = None
        self._initialized = False

    async def initialize(self):
        """Initialize repositories and services"""
        if self._initialized:
            return

        logger.info("Initializing service container", backend=self.backend)

        if self.backend == "supabase":
            self._supabase = SupabaseClient()
            passengers = SupabasePassengerRepository(self._supabase)
            flights = SupabaseFlightRepository(self._supabase)
            interactions = SupabaseInteractionRepository(self._supabase)
        elif self.backend == "memory":
            passengers = InMemoryPassengerRepository()
            flights = InMemoryFlightRepository()
            interactions = InMemoryInteractionRepository(passengers)
        else:
            raise ValueError(f"Unknown persistence backend: {self.backend}")

        self.register_repositories(passengers, flights, interactions)
        self._initialized = True
        logger.info("Service container initialized successfully", services=self.list_services())

    def register_repositories(
        self,
        passengers: PassengerRepositoryInterface,
        flights: FlightRepositoryInterface,
        interactions: InteractionRepositoryInterface
    ):
        """Register repositories and rebuild the services that depend on them"""
        timeline_builder = RecoveryTimelineBuilder()

        self._services = {
            'passenger_repository': passengers,
            'flight_repository': flights,
            'interaction_repository': interactions,
            'manifest_parser': ManifestParser(),
            'manifest_processor': ManifestProcessor(passengers, flights, NamePassengerMatcher()),
            'timeline_builder': timeline_builder,
            'metrics_aggregator': MetricsAggregator(timeline_builder),
            'suggestion_engine': RecoverySuggestionEngine(InMemoryStateStore()),
            'passenger_recommender': PassengerRecommender(timeline_builder),
            'interaction_recorder': InteractionRecorder(interactions, passengers),
        }
        self._initialized = True

    def get(self, name: str) -> Any:
        if name not in self._services:
            raise RuntimeError(f"Service '{name}' not registered; call initialize() first")
        return self._services[name]

    def get_passenger_repository(self) -> PassengerRepositoryInterface:
        return self.get('passenger_repository')

    def get_flight_repository(self) -> FlightRepositoryInterface:
        return self.get('flight_repository')

    def get_interaction_repository(self) -> InteractionRepositoryInterface:
        return self.get('interaction_repository')

    def get_manifest_parser(self) -> ManifestParser:
        return self.get('manifest_parser')

    def get_manifest_processor(self) -> ManifestProcessor:
        return self.get('manifest_processor')

    def get_timeline_builder(self) -> RecoveryTimelineBuilder:
        return self.get('timeline_builder')

    def get_metrics_aggregator(self) -> MetricsAggregator:
        return self.get('metrics_aggregator')

    def get_suggestion_engine(self) -> RecoverySuggestionEngine:
        return self.get('suggestion_engine')

    def get_passenger_recommender(self) -> PassengerRecommender:
        return self.get('passenger_recommender')

    def get_interaction_recorder(self) -> InteractionRecorder:
        return self.get('interaction_recorder')

    async def cleanup(self):
        """Release network clients"""
        if self._supabase is not None:
            await self._supabase.close()
            self._supabase = None
        self._services.clear()
        self._initialized = False
        logger.info("Service container cleanup completed")

    def is_initialized(self) -> bool:
        """Check if container is initialized"""
        return self._initialized

    def list_services(self) -> Dict[str, str]:
        """List all registered services"""
        return {name: type(service).__name__ for name, service in self._services.items()}


# Global container instance
container = ServiceContainer()
