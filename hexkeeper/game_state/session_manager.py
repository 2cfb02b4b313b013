"""
Session Manager for Hexkeeper.

Saves and loads campaigns as JSON files. A save holds the campaign state,
the calendar, the terrain registry and the session log. Undo history is
deliberately left out: a loaded campaign starts with nothing to undo.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
import json
import logging
import uuid

from hexkeeper.game_state.campaign_controller import (
    CampaignController,
    CampaignState,
    SessionLogEntry,
)
from hexkeeper.game_state.undo_history import DEFAULT_UNDO_DEPTH, UndoHistory
from hexkeeper.hex_crawl.terrain import Terrain
from hexkeeper.weather.calendar import Calendar

logger = logging.getLogger(__name__)


SAVE_FORMAT_VERSION = "1.0.0"


@dataclass
class CampaignSession:
    """Everything needed to save and restore a campaign."""

    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    session_name: str = "Untitled Campaign"
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    last_saved_at: Optional[str] = None
    version: str = SAVE_FORMAT_VERSION

    state: CampaignState = field(default_factory=CampaignState)
    calendar: dict[str, Any] = field(default_factory=lambda: Calendar().to_dict())
    terrains: list[Terrain] = field(default_factory=list)
    log: list[SessionLogEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "session_name": self.session_name,
            "created_at": self.created_at,
            "last_saved_at": self.last_saved_at,
            "version": self.version,
            "state": self.state.to_dict(),
            "calendar": self.calendar,
            "terrains": [t.to_dict() for t in self.terrains],
            "log": [e.to_dict() for e in self.log],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CampaignSession":
        return cls(
            session_id=data.get("session_id", str(uuid.uuid4())),
            session_name=data.get("session_name", "Untitled Campaign"),
            created_at=data.get("created_at", datetime.now().isoformat()),
            last_saved_at=data.get("last_saved_at"),
            version=data.get("version", SAVE_FORMAT_VERSION),
            state=CampaignState.from_dict(data.get("state", {})),
            calendar=data.get("calendar") or Calendar().to_dict(),
            terrains=[Terrain.from_dict(t) for t in data.get("terrains", [])],
            log=[SessionLogEntry.from_dict(e) for e in data.get("log", [])],
        )


class SessionManager:
    """
    Manages campaign save/load operations.

    Handles:
    - Saving sessions to JSON files
    - Loading sessions from JSON files
    - Listing and deleting save files
    - Capturing a running controller into a session and rebuilding one
    """

    def __init__(self, save_directory: Optional[Path] = None):
        """
        Args:
            save_directory: Directory for save files. Defaults to ./saves/
        """
        self.save_directory = Path(save_directory) if save_directory else Path("./saves")
        self.save_directory.mkdir(parents=True, exist_ok=True)
        self._current_session: Optional[CampaignSession] = None

    @property
    def current_session(self) -> Optional[CampaignSession]:
        return self._current_session

    def new_session(self, session_name: str = "New Campaign") -> CampaignSession:
        session = CampaignSession(session_name=session_name)
        self._current_session = session
        logger.info(f"Created new session: {session.session_id}")
        return session

    def capture(
        self,
        controller: CampaignController,
        session: Optional[CampaignSession] = None,
    ) -> CampaignSession:
        """
        Copy a controller's campaign into a session (the current one by default).

        Raises:
            ValueError: If there is no session to capture into
        """
        session = session or self._current_session
        if not session:
            raise ValueError("No session to capture into")

        session.state = controller.state
        session.calendar = controller.calendar.to_dict()
        session.terrains = controller.terrains()
        session.log = controller.all_log_entries()
        return session

    def restore(
        self,
        session: Optional[CampaignSession] = None,
        undo_depth: int = DEFAULT_UNDO_DEPTH,
    ) -> CampaignController:
        """
        Build a controller from a session (the current one by default).

        Raises:
            ValueError: If there is no session to restore
        """
        session = session or self._current_session
        if not session:
            raise ValueError("No session to restore")

        return CampaignController(
            calendar=Calendar.from_dict(session.calendar),
            terrains=session.terrains,
            state=session.state,
            undo_history=UndoHistory(undo_depth),
            log_entries=session.log,
        )

    def save_session(
        self,
        session: Optional[CampaignSession] = None,
        filename: Optional[str] = None,
    ) -> Path:
        """
        Save a session to a JSON file.

        Args:
            session: Session to save (defaults to current session)
            filename: Custom filename (defaults to <name>_<id prefix>.json)

        Returns:
            Path to the saved file
        """
        session = session or self._current_session
        if not session:
            raise ValueError("No session to save")

        session.last_saved_at = datetime.now().isoformat()

        if filename is None:
            safe_name = "".join(c for c in session.session_name if c.isalnum() or c in " -_")
            filename = f"{safe_name}_{session.session_id[:8]}.json"

        filepath = self.save_directory / filename
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(session.to_dict(), f, indent=2, ensure_ascii=False)

        logger.info(f"Saved session to: {filepath}")
        return filepath

    def load_session(self, filepath: Path | str) -> CampaignSession:
        """
        Load a session from a JSON file, trying the save directory if the
        path does not exist as given.

        Raises:
            FileNotFoundError: If neither path exists
            json.JSONDecodeError: If the file is not valid JSON
        """
        filepath = Path(filepath)
        if not filepath.exists():
            filepath = self.save_directory / filepath

        if not filepath.exists():
            raise FileNotFoundError(f"Save file not found: {filepath}")

        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        session = CampaignSession.from_dict(data)
        self._current_session = session

        logger.info(f"Loaded session: {session.session_name} ({session.session_id})")
        return session

    def list_sessions(self) -> list[dict[str, Any]]:
        """
        List all available save files, most recently saved first.

        Unreadable files are skipped with a warning.
        """
        sessions = []

        for filepath in self.save_directory.glob("*.json"):
            try:
                with open(filepath, "r", encoding="utf-8") as f:
                    data = json.load(f)

                sessions.append({
                    "filepath": str(filepath),
                    "filename": filepath.name,
                    "session_id": data.get("session_id", "unknown"),
                    "session_name": data.get("session_name", "Untitled"),
                    "created_at": data.get("created_at"),
                    "last_saved_at": data.get("last_saved_at"),
                    "version": data.get("version", "unknown"),
                })
            except (json.JSONDecodeError, KeyError, AttributeError) as e:
                logger.warning(f"Could not read save file {filepath}: {e}")

        sessions.sort(
            key=lambda s: s.get("last_saved_at") or s.get("created_at") or "",
            reverse=True,
        )
        return sessions

    def delete_session(self, filepath: Path | str) -> bool:
        """
        Delete a save file.

        Returns:
            True if a file was deleted
        """
        filepath = Path(filepath)
        if not filepath.exists():
            filepath = self.save_directory / filepath

        if filepath.exists():
            filepath.unlink()
            logger.info(f"Deleted save file: {filepath}")
            return True
        return False
