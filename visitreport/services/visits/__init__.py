"""
Site visit data: normalization, fetching, filtering
"""
from visitreport.services.visits.models import VisitRecord, parse_instant
from visitreport.services.visits.filters import FilterPolicy, apply_policy, filter_recent, sort_by_visit_date

__all__ = [
    "VisitRecord",
    "parse_instant",
    "FilterPolicy",
    "apply_policy",
    "filter_recent",
    "sort_by_visit_date",
]
