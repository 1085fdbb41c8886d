"""SQLite persistence for request status history and donations.

The engine never reads from here; this layer only receives outcomes after the
engine has committed them in memory. Write failures are logged, never raised.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from bloodlink.domain.models import BloodRequest, Donor, RequestStatusChanged
from bloodlink.utils.config import Settings, get_settings
from bloodlink.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class DonationRecord:
    donation_id: int
    donor_id: str
    request_id: str
    donor_name: str
    blood_type: str
    units: int
    hospital: str
    recipient_name: str
    donated_at: str


@dataclass(frozen=True)
class LeaderboardEntry:
    donor_id: str
    donor_name: str
    blood_type: str
    donation_count: int
    total_units: int


@dataclass(frozen=True)
class StatusTransitionRecord:
    request_id: str
    previous_status: str
    status: str
    source: Optional[str]
    occurred_at: str


class DataRepository:
    """Encapsulates SQLite access so the engine stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        return connection

    def initialize_database(self) -> None:
        """Create persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS RequestEvents (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        request_id TEXT NOT NULL,
                        previous_status TEXT NOT NULL,
                        status TEXT NOT NULL,
                        source TEXT,
                        occurred_at TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Donations (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        donor_id TEXT NOT NULL,
                        request_id TEXT NOT NULL,
                        donor_name TEXT NOT NULL,
                        donor_email TEXT,
                        blood_type TEXT NOT NULL,
                        units INTEGER NOT NULL CHECK (units > 0),
                        hospital TEXT NOT NULL DEFAULT '',
                        recipient_name TEXT NOT NULL DEFAULT '',
                        donated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_request_events_request
                    ON RequestEvents(request_id);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_donations_donor
                    ON Donations(donor_id);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def record_status_transition(self, event: RequestStatusChanged) -> bool:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO RequestEvents (
                        request_id,
                        previous_status,
                        status,
                        source,
                        occurred_at
                    )
                    VALUES (?, ?, ?, ?, ?);
                    """,
                    (
                        event.request_id,
                        event.previous_status.value,
                        event.status.value,
                        event.source.value if event.source is not None else None,
                        event.occurred_at.isoformat(),
                    ),
                )
                conn.commit()
            return True
        except sqlite3.Error:
            logger.exception(
                "Status transition not persisted | request_id=%s | status=%s",
                event.request_id,
                event.status.value,
            )
            return False

    def record_donation(self, request: BloodRequest, donor: Donor) -> bool:
        """Append a confirmed donation to the history table."""
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO Donations (
                        donor_id,
                        request_id,
                        donor_name,
                        donor_email,
                        blood_type,
                        units,
                        hospital,
                        recipient_name
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        donor.donor_id,
                        request.request_id,
                        donor.name,
                        donor.email,
                        donor.blood_type.value,
                        request.units,
                        request.hospital,
                        request.patient_name,
                    ),
                )
                conn.commit()
            return True
        except sqlite3.Error:
            logger.exception(
                "Donation not persisted | request_id=%s | donor_id=%s",
                request.request_id,
                donor.donor_id,
            )
            return False

    def list_status_transitions(self, request_id: str) -> list[StatusTransitionRecord]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT request_id, previous_status, status, source, occurred_at
                FROM RequestEvents
                WHERE request_id = ?
                ORDER BY id ASC;
                """,
                (request_id,),
            )
            return [
                StatusTransitionRecord(
                    request_id=str(row["request_id"]),
                    previous_status=str(row["previous_status"]),
                    status=str(row["status"]),
                    source=row["source"],
                    occurred_at=str(row["occurred_at"]),
                )
                for row in cursor.fetchall()
            ]

    def list_donations(self, donor_id: Optional[str] = None) -> list[DonationRecord]:
        query = """
            SELECT
                id,
                donor_id,
                request_id,
                donor_name,
                blood_type,
                units,
                hospital,
                recipient_name,
                donated_at
            FROM Donations
        """
        params: tuple[str, ...] = ()
        if donor_id is not None:
            query += " WHERE donor_id = ?"
            params = (donor_id,)
        query += " ORDER BY id DESC;"
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [
                DonationRecord(
                    donation_id=int(row["id"]),
                    donor_id=str(row["donor_id"]),
                    request_id=str(row["request_id"]),
                    donor_name=str(row["donor_name"]),
                    blood_type=str(row["blood_type"]),
                    units=int(row["units"]),
                    hospital=str(row["hospital"]),
                    recipient_name=str(row["recipient_name"]),
                    donated_at=str(row["donated_at"]),
                )
                for row in cursor.fetchall()
            ]

    def donor_leaderboard(self, limit: int = 10) -> list[LeaderboardEntry]:
        """Donors ranked by total donated units."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT
                    donor_id,
                    MAX(donor_name) AS donor_name,
                    MAX(blood_type) AS blood_type,
                    COUNT(*) AS donation_count,
                    SUM(units) AS total_units
                FROM Donations
                GROUP BY donor_id
                ORDER BY total_units DESC, donation_count DESC, donor_id ASC
                LIMIT ?;
                """,
                (limit,),
            )
            return [
                LeaderboardEntry(
                    donor_id=str(row["donor_id"]),
                    donor_name=str(row["donor_name"]),
                    blood_type=str(row["blood_type"]),
                    donation_count=int(row["donation_count"]),
                    total_units=int(row["total_units"]),
                )
                for row in cursor.fetchall()
            ]

    def count_status_transitions(self) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM RequestEvents;")
            return int(cursor.fetchone()["count"])

    def count_donations(self) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM Donations;")
            return int(cursor.fetchone()["count"])
