"""
Conversions between template space and zoomed view space.
"""

# Standard Library
import math

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config


TEMPLATE_WIDTH = cte.config.TEMPLATE_WIDTH
TEMPLATE_HEIGHT = cte.config.TEMPLATE_HEIGHT
MIN_ZOOM = cte.config.MIN_ZOOM
MAX_ZOOM = cte.config.MAX_ZOOM
ZOOM_STEP = cte.config.ZOOM_STEP


#============================================
def check_zoom(zoom: float) -> float:
	"""
	Validate a zoom factor.

	Args:
		zoom: Zoom factor.

	Returns:
		The zoom as a float.
	"""
	value = float(zoom)
	if not math.isfinite(value) or value <= 0.0:
		raise ValueError(f"Zoom must be a positive finite number, got {zoom!r}")
	return value


def to_view(value: float, zoom: float) -> float:
	return value * check_zoom(zoom)


def to_template(value: float, zoom: float) -> float:
	return value / check_zoom(zoom)


def point_to_view(point: tuple[float, float], zoom: float) -> tuple[float, float]:
	return (to_view(point[0], zoom), to_view(point[1], zoom))


def point_to_template(point: tuple[float, float], zoom: float) -> tuple[float, float]:
	return (to_template(point[0], zoom), to_template(point[1], zoom))


#============================================
def clamp_zoom(zoom: float) -> float:
	"""
	Clamp a zoom factor into the editor's range.

	Args:
		zoom: Requested zoom.

	Returns:
		Zoom within [MIN_ZOOM, MAX_ZOOM].
	"""
	return min(MAX_ZOOM, max(MIN_ZOOM, check_zoom(zoom)))


#============================================
def snap_zoom(zoom: float) -> float:
	"""
	Snap a zoom factor to the nearest editor step and clamp it.

	Args:
		zoom: Requested zoom.

	Returns:
		Stepped zoom within range.
	"""
	steps = round((clamp_zoom(zoom) - MIN_ZOOM) / ZOOM_STEP)
	return clamp_zoom(MIN_ZOOM + steps * ZOOM_STEP)


def step_zoom(zoom: float, steps: int) -> float:
	return snap_zoom(snap_zoom(zoom) + steps * ZOOM_STEP)


#============================================
def surface_size(zoom: float) -> tuple[int, int]:
	"""
	Pixel size of the preview surface at a zoom level.

	Args:
		zoom: Zoom factor.

	Returns:
		Tuple of (width, height) in whole pixels.
	"""
	value = check_zoom(zoom)
	return (int(math.floor(TEMPLATE_WIDTH * value)), int(math.floor(TEMPLATE_HEIGHT * value)))
