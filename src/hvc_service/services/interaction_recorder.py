"""
Recording of agent attention sessions
"""

from ..interfaces.repositories import InteractionRepositoryInterface, PassengerRepositoryInterface
from ..types import Interaction, InteractionCreate, ValidationError
from ..utils.logger import get_logger
from ..utils.validators import is_valid_score


class InteractionRecorder:
    """Validates and stores interactions; interactions are never updated afterwards"""

    def __init__(
        self,
        interaction_repository: InteractionRepositoryInterface,
        passenger_repository: PassengerRepositoryInterface
    ):
        self.interactions = interaction_repository
        self.passengers = passenger_repository
        self.logger = get_logger("interaction_recorder")

    async def record(self, interaction: InteractionCreate) -> Interaction:
        if interaction.score is not None and not is_valid_score(interaction.score):
            raise ValidationError(f"Score must be an integer between 1 and 10, got {interaction.score!r}")

        # Raises NotFoundError for unknown passengers
        await self.passengers.get_by_id(interaction.passenger_id)

        stored = await self.interactions.create(interaction)
        self.logger.info(
            "interaction_recorded",
            interaction_id=stored.id,
            passenger_id=stored.passenger_id,
            score=stored.score,
            has_incident=bool(stored.incident)
        )
        return stored
