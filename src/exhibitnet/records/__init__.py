"""
Participation records: the single source of truth every analysis reads from.
"""

from .store import ParticipationRecord, RecordStore, decade_of, decade_expr
