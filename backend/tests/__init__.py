# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from tourney.models.competition import Competition  # noqa: F401
from tourney.models.competition_team import CompetitionTeam  # noqa: F401
from tourney.models.feedback import Feedback  # noqa: F401
from tourney.models.match import Match  # noqa: F401
from tourney.models.team import Team  # noqa: F401
from tourney.models.team_player import TeamPlayer  # noqa: F401
