"""
Exception types raised by the coupon engine.
"""


class CouponEngineError(Exception):
	"""Base class for coupon engine failures."""


class TemplateLoadError(CouponEngineError):
	"""A template image could not be fetched or decoded."""

	def __init__(self, url: str, reason: str):
		self.url = url
		self.reason = reason
		super().__init__(f"Template load failed for {url[:70]!r}: {reason}")


class LayoutError(CouponEngineError):
	"""A field set violates the layout model."""
