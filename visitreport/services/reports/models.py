"""
Visit Reports - Data Models

Pydantic models for run configuration and per-channel outcomes.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from visitreport.services.visits.filters import FilterPolicy


class ReportConfig(BaseModel):
    """Everything a run needs that is not a collaborator."""

    model_config = ConfigDict(frozen=True)

    sender_email: Optional[str] = Field(default=None, description="From address for report emails")
    report_email: Optional[str] = Field(default=None, description="Fixed recipient of the scheduled email")
    report_whatsapp_number: Optional[str] = Field(default=None, description="Fixed recipient of the scheduled WhatsApp report")
    timezone: str = Field(default="Asia/Kolkata", description="Display timezone")
    filter_policy: FilterPolicy = FilterPolicy.RECENT
    recency_window_hours: int = 24
    chat_max_length: int = 1500
    chat_pacing_seconds: float = 2.0


class _WireModel(BaseModel):
    """Serialized with camelCase keys, None fields omitted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ChatDeliveryResult(_WireModel):
    """Outcome of one WhatsApp report (single message or chunked)."""
    success: bool = True
    message_id: Optional[str] = None
    message_ids: Optional[List[str]] = None
    visits_count: int = 0


class ChannelResult(_WireModel):
    """Outcome of one channel within a run."""
    success: bool
    message_id: Optional[str] = None
    message_ids: Optional[List[str]] = None
    visits_count: Optional[int] = None
    visit_count: Optional[int] = None
    data_type: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_chat(cls, result: ChatDeliveryResult, data_type: str) -> "ChannelResult":
        return cls(
            success=result.success,
            message_id=result.message_id,
            message_ids=result.message_ids,
            visits_count=result.visits_count,
            data_type=data_type,
        )

    @classmethod
    def failed(cls, error: Exception, data_type: Optional[str] = None) -> "ChannelResult":
        return cls(success=False, error=str(error), data_type=data_type)


class ScheduledRunResult(_WireModel):
    """Outcome of a timer-triggered run."""
    success: bool
    message: str
    visit_count: int
    email: Optional[ChannelResult] = None
    whatsapp: Optional[ChannelResult] = None


class ManualRunResult(_WireModel):
    """Outcome of a request-triggered run, returned as the response body."""
    ok: bool
    message: str
    results: Dict[str, ChannelResult] = Field(default_factory=dict)
    total_visits: int = 0
    sent_visits: int = 0
    note: Optional[str] = None

    @property
    def all_failed(self) -> bool:
        return bool(self.results) and not any(result.success for result in self.results.values())
