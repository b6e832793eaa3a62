"""FastAPI dependencies for the coordinator and notification hub."""

import os

from dotenv import load_dotenv

from tourney.services.competition_locks import CompetitionLocks
from tourney.services.notifications import NotificationHub
from tourney.services.tournament_coordinator import TournamentCoordinator

load_dotenv()

NOTIFICATION_BUFFER_SIZE = int(os.getenv("NOTIFICATION_BUFFER_SIZE", "200"))
NOTIFICATION_TTL_SECONDS = int(os.getenv("NOTIFICATION_TTL_SECONDS", "3600"))

_coordinator = TournamentCoordinator(
    hub=NotificationHub(buffer_size=NOTIFICATION_BUFFER_SIZE, ttl_seconds=NOTIFICATION_TTL_SECONDS),
    locks=CompetitionLocks(),
)


def get_coordinator() -> TournamentCoordinator:
    """Get the process-wide tournament coordinator."""
    return _coordinator
