"""Campaign state management module."""

from hexkeeper.game_state.campaign_controller import (
    CampaignController,
    CampaignState,
    CampaignStateUpdate,
    SessionLogEntry,
    LogCategory,
    EnterHexResult,
    DirectionCheckResult,
    CampaignError,
    TerrainNotFoundError,
    NothingToUndoError,
    ImpassableTerrainError,
    InvalidChanceError,
    InvalidUpdateError,
)
from hexkeeper.game_state.undo_history import UndoHistory, UndoSnapshot
from hexkeeper.game_state.session_manager import SessionManager, CampaignSession

__all__ = [
    "CampaignController",
    "CampaignState",
    "CampaignStateUpdate",
    "SessionLogEntry",
    "LogCategory",
    "EnterHexResult",
    "DirectionCheckResult",
    "CampaignError",
    "TerrainNotFoundError",
    "NothingToUndoError",
    "ImpassableTerrainError",
    "InvalidChanceError",
    "InvalidUpdateError",
    "UndoHistory",
    "UndoSnapshot",
    "SessionManager",
    "CampaignSession",
]
