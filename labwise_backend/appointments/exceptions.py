"""
Scheduling-specific exceptions for the appointments app.

These exceptions are raised by the scheduling services and are translated
to DRF responses in the views (409 for conflicts, 400 for bad input).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Conflict:
	"""Represents a single scheduling conflict."""
	type: str  # 'appointment_overlap'
	model: str  # 'Appointment'
	id: int | None = None
	message: str | None = None
	meta: dict[str, Any] = field(default_factory=dict)

	def to_dict(self) -> dict[str, Any]:
		result = {
			'type': self.type,
			'model': self.model,
		}
		if self.id is not None:
			result['id'] = self.id
		if self.message:
			result['message'] = self.message
		if self.meta:
			result['meta'] = self.meta
		return result


class SchedulingError(Exception):
	"""Base exception for all scheduling-related errors."""
	pass


class SchedulingConflictError(SchedulingError):
	"""
	Raised when the requested time window overlaps existing appointments.

	Contains a list of Conflict objects describing each conflict found.
	"""
	def __init__(self, conflicts: list[Conflict], message: str = "Scheduling conflict detected"):
		self.conflicts = conflicts
		self.message = message
		super().__init__(message)

	def to_dict(self) -> dict[str, Any]:
		return {
			'detail': self.message,
			'conflicts': [c.to_dict() for c in self.conflicts],
		}


class InvalidSchedulingData(SchedulingError):
	"""
	Raised when scheduling data is invalid (e.g. a non-positive duration).
	"""
	def __init__(self, message: str, field: str | None = None):
		self.field = field
		super().__init__(message)

	def to_dict(self) -> dict[str, Any]:
		result = {'detail': str(self)}
		if self.field:
			result['field'] = self.field
		return result
