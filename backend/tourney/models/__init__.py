from tourney.models.competition import Competition
from tourney.models.competition_team import CompetitionTeam
from tourney.models.feedback import Feedback, FeedbackCategory, FeedbackStatus
from tourney.models.match import Match
from tourney.models.team import Team
from tourney.models.team_player import TeamPlayer

__all__ = [
    "Competition",
    "CompetitionTeam",
    "Feedback",
    "FeedbackCategory",
    "FeedbackStatus",
    "Match",
    "Team",
    "TeamPlayer",
]
