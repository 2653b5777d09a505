"""
Community report handling
Creates incident reports and loads the daily activity feed.
"""

import logging
from datetime import datetime
from typing import Optional, List, Dict, Any, Sequence
from dataclasses import dataclass, field
from enum import Enum

from communitywatch.core.config import settings
from communitywatch.core.constants import ALERT_MESSAGES, HEAT_MAP_POINT_WEIGHT, REPORT_TYPE_STYLES
from communitywatch.core.date_utils import current_time_string, format_to_local_time, get_formatted_date
from communitywatch.core.geo_utils import Coordinates
from communitywatch.crowdsource.ranking import rank_reports
from communitywatch.crowdsource.validation import validate_report

logger = logging.getLogger(__name__)


class ReportType(str, Enum):
    """Kind of incident being reported."""
    CRIME = "Crime"
    SUSPICIOUS_ACTIVITY = "Suspicious Activity"
    BE_ALERT = "Be Alert"

    @property
    def style(self) -> Dict[str, str]:
        return style_for(self.value)


def style_for(report_type: str) -> Dict[str, str]:
    """Icon and colours for a report type; unknown types get the default style."""
    return REPORT_TYPE_STYLES.get((report_type or "").lower(), REPORT_TYPE_STYLES["default"])


class StoreState(str, Enum):
    """Load state of a store."""
    IDLE = ""
    PENDING = "pending"
    DONE = "done"


@dataclass
class Report:
    """
    Incident report submitted by a user.

    Read-only once written; ``id`` is only known after it comes back from
    Firestore.
    """
    coords: Coordinates
    user_id: str = ""
    name: str = ""
    report_type: str = ""
    description: str = ""
    location: str = ""
    date: str = ""
    time: str = ""
    id: Optional[str] = None

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "Report":
        """Build from a Firestore document dict (camelCase keys)."""
        return cls(
            coords=Coordinates.from_dict(data.get("coords") or {"lat": 0.0, "lng": 0.0}),
            user_id=data.get("userId", ""),
            name=data.get("name", ""),
            report_type=data.get("reportType", ""),
            description=data.get("description", ""),
            location=data.get("location", ""),
            date=data.get("date", ""),
            time=data.get("time", ""),
            id=data.get("id"),
        )

    def to_document(self) -> Dict[str, Any]:
        """Firestore document body."""
        return {
            "userId": self.user_id,
            "name": self.name,
            "reportType": self.report_type,
            "description": self.description,
            "location": self.location,
            "date": self.date,
            "time": self.time,
            "coords": self.coords.to_dict(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        style = style_for(self.report_type)
        return {
            "id": self.id,
            **self.to_document(),
            "displayTime": format_to_local_time(self.time),
            "icon": style["icon"],
            "color": style["color"],
        }

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on the searchable text fields."""
        needle = query.lower()
        return any(
            needle in (value or "").lower()
            for value in (self.name, self.location, self.description, self.report_type)
        )


class ReportStore:
    """
    Holds the reports currently shown in the feed and on the map.

    All persistence goes through the Firebase service; read failures leave an
    empty feed and a message in ``error`` rather than propagating.
    """

    def __init__(
        self,
        service: Any,
        time_weight: Optional[float] = None,
        distance_weight: Optional[float] = None,
    ):
        """
        Initialize report store.

        Args:
            service: FirebaseService (or anything with the same methods)
            time_weight: Ranking weight for recency
            distance_weight: Ranking weight for proximity
        """
        self.service = service
        self.time_weight = settings.ranking_time_weight if time_weight is None else time_weight
        self.distance_weight = settings.ranking_distance_weight if distance_weight is None else distance_weight

        self.reports: List[Report] = []
        self.state: StoreState = StoreState.IDLE
        self.error: Optional[str] = None

    def get_reports(
        self,
        collection: str,
        date: str,
        coords: Optional[Coordinates] = None,
        locations: Optional[Sequence[str]] = None,
    ) -> List[Report]:
        """
        Load the reports for one day, optionally limited to subscribed locations.

        Args:
            collection: Firestore collection name
            date: Day key (``dd-mm-yy``)
            coords: User position used to rank by proximity
            locations: Location labels to keep; None or empty keeps all

        Returns:
            The ranked reports (also stored on ``self.reports``)
        """
        self.state = StoreState.PENDING
        self.error = None

        filters = [("date", "==", date)]
        if locations:
            filters.append(("location", "in", list(locations)))

        try:
            documents = self.service.query_documents(collection, filters)
        except Exception as e:
            logger.error(f"Failed to load reports for {date}: {e}")
            documents = None
            self.reports = []
            self.error = ALERT_MESSAGES["reports_unavailable"]

        if documents is not None:
            reports = []
            for doc in documents:
                try:
                    reports.append(Report.from_document(doc))
                except (TypeError, ValueError, KeyError, AttributeError) as e:
                    doc_id = doc.get("id") if isinstance(doc, dict) else None
                    logger.warning(f"Skipping malformed report {doc_id}: {e}")

            self.reports = rank_reports(
                reports,
                coords,
                time_weight=self.time_weight,
                distance_weight=self.distance_weight,
            )

        self.state = StoreState.DONE
        logger.info(f"Loaded {len(self.reports)} report(s) for {date}")
        return self.reports

    def create_report(
        self,
        user: Any,
        report_type: str,
        location: str,
        description: str,
        coords: Coordinates,
        now: Optional[datetime] = None,
        collection: Optional[str] = None,
    ) -> Report:
        """
        Validate and store a new report stamped with today's date and time.

        Args:
            user: The reporting user (needs ``id`` and ``first_name``)
            report_type: One of the ReportType values
            location: Location label
            description: What happened
            coords: Where it happened
            now: Submission time; defaults to the current time

        Returns:
            The stored report with its new id

        Raises:
            ValidationError: if the form is incomplete
            FirebaseServiceError: if the write fails
        """
        validate_report(report_type, location, description, coords)

        report = Report(
            coords=coords,
            user_id=user.id,
            name=user.first_name,
            report_type=report_type,
            description=description.strip(),
            location=location.strip(),
            date=get_formatted_date(now),
            time=current_time_string(now),
        )
        report.id = self.service.create_document(collection or settings.reports_collection, report.to_document())

        logger.info(f"New report created: {report.id} at ({coords.lat}, {coords.lng})")
        return report

    def search(self, query: str) -> List[Report]:
        """Reports matching a free-text search; an empty query returns all."""
        if not query or not query.strip():
            return list(self.reports)
        return [r for r in self.reports if r.matches(query.strip())]

    def heat_map_points(self) -> List[List[float]]:
        """[lat, lng, weight] triples for the heat map layer."""
        return [
            [r.coords.lat, r.coords.lng, HEAT_MAP_POINT_WEIGHT]
            for r in self.reports
        ]

    def get_statistics(self) -> Dict[str, Any]:
        """Counts of the loaded reports by type and location."""
        by_type: Dict[str, int] = {}
        by_location: Dict[str, int] = {}

        for report in self.reports:
            by_type[report.report_type] = by_type.get(report.report_type, 0) + 1
            by_location[report.location] = by_location.get(report.location, 0) + 1

        return {
            "total_reports": len(self.reports),
            "by_type": by_type,
            "by_location": by_location,
        }
