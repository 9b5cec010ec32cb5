from talentflow.client.transport import SimulatedTransport, MUTATING_METHODS
from talentflow.client.api import TalentFlowClient
from talentflow.client.cache import QueryCache
from talentflow.client.board import (
    CandidateBoard,
    StageTransition,
    TransitionState,
    LoggingNotifier,
)

__all__ = [
    "SimulatedTransport",
    "MUTATING_METHODS",
    "TalentFlowClient",
    "QueryCache",
    "CandidateBoard",
    "StageTransition",
    "TransitionState",
    "LoggingNotifier",
]
