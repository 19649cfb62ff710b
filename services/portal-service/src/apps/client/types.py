# services/portal-service/src/apps/client/types.py
"""
Client Record Types

Typed views of the rows returned by portal functions, plus the result
wrapper every gateway operation returns.
"""

import logging
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, Generic, Optional, TypeVar

from apps.api.serializers import AdminReviewSerializer

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Record:
    """Mixin building a dataclass from a row mapping, ignoring unknown keys."""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in (data or {}).items() if key in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Pilot(Record):
    id: Optional[str] = None
    name: str = ''
    email: Optional[str] = None
    user_id: Optional[str] = None
    is_admin: bool = False
    is_hidden: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Aircraft(Record):
    id: Optional[str] = None
    tail_number: str = ''
    make: str = ''
    model: str = ''
    year: Optional[int] = None
    type: Optional[str] = None
    category: Optional[str] = None
    tach_time: Optional[float] = None
    oil_change: Optional[str] = None
    last_annual: Optional[str] = None
    ownership: Optional[str] = None
    image_url: Optional[str] = None
    last_flight: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Flight(Record):
    id: Optional[str] = None
    aircraft_id: Optional[str] = None
    pilot_id: Optional[str] = None
    pilot_name: str = ''
    date: Optional[str] = None
    departure_time: Optional[str] = None
    tach_start: Optional[float] = None
    tach_end: Optional[float] = None
    hobbs_time: Optional[float] = None
    fuel_added: Optional[float] = None
    oil_added: Optional[float] = None
    passenger_count: Optional[int] = None
    route: Optional[str] = None
    category: Optional[str] = None
    squawks: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class AdminReview(Record):
    reviewed_by: str = ''
    reviewed_at: Optional[str] = None
    notes: str = ''

    @classmethod
    def parse(cls, value: Any) -> Optional['AdminReview']:
        """Parse a review blob; anything unusable is None."""
        review = AdminReviewSerializer.parse(value)
        if review is None:
            return None
        return cls.from_dict(review)


@dataclass
class SafetyReport(Record):
    id: Optional[str] = None
    report_date: Optional[str] = None
    reporter_id: Optional[str] = None
    reported_by: Optional[str] = None
    reporter_name: str = ''
    category: str = ''
    description: str = ''
    severity: str = ''
    status: str = ''
    actions: Optional[str] = None
    location: Optional[str] = None
    aircraft_id: Optional[str] = None
    aircraft_details: Optional[Dict[str, Any]] = None
    admin_review: Optional[AdminReview] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SafetyReport':
        report = super().from_dict(data)
        report.admin_review = AdminReview.parse(report.admin_review)
        return report


@dataclass
class RouteTargetTime(Record):
    id: Optional[str] = None
    route: str = ''
    target_time: float = 0.0
    aircraft_id: Optional[str] = None
    pilot_id: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class GatewayResult(Generic[T]):
    """Outcome of a gateway operation; ``error`` is set only on failure."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: T = None) -> 'GatewayResult[T]':
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> 'GatewayResult[T]':
        return cls(success=False, error=error)
