"""
Shared configuration and constants.
"""

# Standard Library
import dataclasses

# PIP3 modules
import reportlab.lib.pagesizes


POINTS_PER_INCH = 72.0
CSS_PIXELS_PER_INCH = 96.0

# native design resolution of a coupon template
TEMPLATE_WIDTH = 1048
TEMPLATE_HEIGHT = 598

DEFAULT_ZOOM = 0.5
MIN_ZOOM = 0.25
MAX_ZOOM = 1.5
ZOOM_STEP = 0.25

RESIZE_HANDLE_SIZE = 8.0
MIN_FIELD_WIDTH = 50.0
MIN_FIELD_HEIGHT = 30.0
MIN_FONT_SIZE = 1.0

QR_FIELD_ID = "qr"
AMOUNT_FIELD_ID = "amount"
SERIAL_FIELD_ID = "serial"

DEFAULT_TEMPLATE_URL = "https://images.unsplash.com/photo-1495521821757-a1efb6729352?w=800&q=80"
TEMPLATE_FETCH_TIMEOUT = 30

DEFAULT_FONT_REGULAR = "DejaVuSans.ttf"
DEFAULT_FONT_BOLD = "DejaVuSans-Bold.ttf"
DEFAULT_TEXT_COLOR = "#1e293b"
EDITOR_LABEL_FONT_SIZE = 12
SERIAL_BACKDROP_COLOR = (255, 255, 255, 204)
SERIAL_BACKDROP_PAD_X = 10.0
SERIAL_BACKDROP_PAD_Y = 4.0
QR_BORDER = 1

PREVIEW_BACKGROUND = "#ffffff"
PREVIEW_OUTLINE_COLOR = "#cbd5e1"
PREVIEW_SELECTED_COLOR = "#f97316"
PREVIEW_LABEL_COLOR = "#64748b"
PREVIEW_QR_TINT = (0, 0, 0, 13)
PREVIEW_QR_PATTERN_COLOR = "#cbd5e1"
PREVIEW_LINE_WIDTH = 2
PREVIEW_SELECTED_LINE_WIDTH = 3

SUPPORTED_DENSITIES = (5, 10, 15, 20)
DEFAULT_DENSITY = 10
SHEET_ROWS = 5
DEFAULT_SHEET_DPI = 300
SHEET_PADDING_CSS_PX = 5.0
SHEET_BORDER_COLOR = "#e2e8f0"
SHEET_BORDER_CSS_PX = 1.0
PROGRESS_BAR_WIDTH = 20


@dataclasses.dataclass
class SheetConfig:
	page_width_pt: float = reportlab.lib.pagesizes.A4[0]
	page_height_pt: float = reportlab.lib.pagesizes.A4[1]
	dpi: int = DEFAULT_SHEET_DPI
	padding_css_px: float = SHEET_PADDING_CSS_PX
	draw_borders: bool = True
	border_color: str = SHEET_BORDER_COLOR


@dataclasses.dataclass
class SheetGrid:
	columns: int
	rows: int
	sheet_width: int
	sheet_height: int
	cell_width: float
	cell_height: float
	padding: float
	border_width: int

	@property
	def per_page(self) -> int:
		return self.columns * self.rows


@dataclasses.dataclass
class BatchResult:
	total_records: int
	sheets: int
	per_page: int
	requested_per_page: int


#============================================
def points_to_pixels(value: float, dpi: int) -> int:
	"""
	Convert points to whole pixels at a given resolution.

	Args:
		value: Points value.
		dpi: Output resolution.

	Returns:
		Pixel count, rounded.
	"""
	return int(round(value / POINTS_PER_INCH * dpi))


#============================================
def css_pixels_to_pixels(value: float, dpi: int) -> float:
	"""
	Convert CSS pixels (96 per inch) to output pixels.

	Args:
		value: CSS pixel value.
		dpi: Output resolution.

	Returns:
		Output pixel value.
	"""
	return value * dpi / CSS_PIXELS_PER_INCH
