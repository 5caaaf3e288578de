"""
Order workflow exceptions.

Raised by ``orders.services`` and ``orders.workflow`` and translated to
DRF responses in the views.
"""

from __future__ import annotations

from typing import Any


class OrderError(Exception):
	"""Base exception for order workflow errors."""

	def to_dict(self) -> dict[str, Any]:
		return {'detail': str(self)}


class UnknownTestCodesError(OrderError):
	"""One or more requested test codes are not active catalog entries."""

	def __init__(self, codes: list[str]):
		self.codes = codes
		super().__init__(f"Invalid test codes: {', '.join(codes)}")

	def to_dict(self) -> dict[str, Any]:
		return {
			'detail': str(self),
			'invalid_codes': self.codes,
		}


class InvalidOrderData(OrderError):
	def __init__(self, message: str, field: str | None = None):
		self.field = field
		super().__init__(message)

	def to_dict(self) -> dict[str, Any]:
		result = {'detail': str(self)}
		if self.field:
			result['field'] = self.field
		return result


class SampleStateError(OrderError):
	"""The sample is not in a state that allows the requested transition."""

	def __init__(self, *, sample_id: int, status: str, message: str):
		self.sample_id = sample_id
		self.status = status
		super().__init__(message)

	def to_dict(self) -> dict[str, Any]:
		return {
			'detail': str(self),
			'sample_id': self.sample_id,
			'status': self.status,
		}
