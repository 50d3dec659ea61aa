"""
Coupon layout model: positioned fields over a template image.
"""

# Standard Library
import dataclasses
import logging
import math

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config
import coupon_template_engine.errors


QR_FIELD_ID = cte.config.QR_FIELD_ID
AMOUNT_FIELD_ID = cte.config.AMOUNT_FIELD_ID
MIN_FIELD_WIDTH = cte.config.MIN_FIELD_WIDTH
MIN_FIELD_HEIGHT = cte.config.MIN_FIELD_HEIGHT
DEFAULT_TEXT_COLOR = cte.config.DEFAULT_TEXT_COLOR

LayoutError = cte.errors.LayoutError

FONT_WEIGHTS = ("normal", "bold")

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Field:
	id: str
	label: str
	x: float
	y: float
	width: float
	height: float
	font_size: float = 24.0
	color: str = DEFAULT_TEXT_COLOR
	font_weight: str = "bold"

	def contains(self, x: float, y: float) -> bool:
		return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


@dataclasses.dataclass
class LayoutModel:
	fields: list[Field]
	qr_enabled: bool = False
	amount_visible: bool | None = None

	def reconciled(self) -> "LayoutModel":
		fields = reconcile_fields(self.fields, self.qr_enabled, self.amount_visible)
		return LayoutModel(fields, self.qr_enabled, self.amount_visible)


#============================================
def default_fields() -> list[Field]:
	"""
	Build the field set used when no layout has been saved.

	Returns:
		Fresh list of the five stock fields.
	"""
	return [
		Field("name", "Employee Name", 241, 326, 300, 50, 48, "#1e293b", "bold"),
		Field("empId", "Employee ID", 220, 398, 300, 50, 48, "#1e293b", "bold"),
		Field("date", "Issue Date", 220, 517, 250, 30, 24, "#1e293b", "bold"),
		Field("serial", "Serial Code", 778, 141, 200, 40, 36, "#334155", "bold"),
		default_amount_field(),
	]


def default_qr_field() -> Field:
	return Field(QR_FIELD_ID, "QR Code", 800, 400, 150, 150, 12, "#000000", "normal")


def default_amount_field() -> Field:
	return Field(AMOUNT_FIELD_ID, "Amount", 740, 251, 250, 60, 56, "#059669", "bold")


#============================================
def find_field(fields: list[Field], field_id: str | None) -> Field | None:
	"""
	Find a field by id.

	Args:
		fields: Field list.
		field_id: Id to look up.

	Returns:
		Matching field or None.
	"""
	if field_id is None:
		return None
	for field in fields:
		if field.id == field_id:
			return field
	return None


#============================================
def ensure_unique_ids(fields: list[Field]) -> list[Field]:
	"""
	Drop fields whose id already appeared earlier in the list.

	Args:
		fields: Field list, possibly with duplicates.

	Returns:
		New list keeping the first field for each id.
	"""
	seen: set[str] = set()
	unique: list[Field] = []
	for field in fields:
		if field.id in seen:
			logger.warning("Dropping duplicate layout field id %r", field.id)
			continue
		seen.add(field.id)
		unique.append(field)
	return unique


#============================================
def reconcile_fields(
	fields: list[Field],
	qr_enabled: bool,
	amount_visible: bool | None,
) -> list[Field]:
	"""
	Apply the qr and amount toggles to a field set.

	A missing qr field is appended when qr is enabled and removed when it is
	not. The amount field is appended unless amount_visible is explicitly
	False, in which case it is removed. Other fields keep their order. The
	input list is not modified and running the result through again yields
	the same set.

	Args:
		fields: Current field list.
		qr_enabled: Whether the coupon carries a scan code.
		amount_visible: Amount toggle; None counts as visible.

	Returns:
		Reconciled field list (copies).
	"""
	result = [dataclasses.replace(field) for field in ensure_unique_ids(fields)]

	has_qr = find_field(result, QR_FIELD_ID) is not None
	if qr_enabled and not has_qr:
		result.append(default_qr_field())
	elif not qr_enabled and has_qr:
		result = [field for field in result if field.id != QR_FIELD_ID]

	show_amount = amount_visible is not False
	has_amount = find_field(result, AMOUNT_FIELD_ID) is not None
	if show_amount and not has_amount:
		result.append(default_amount_field())
	elif not show_amount and has_amount:
		result = [field for field in result if field.id != AMOUNT_FIELD_ID]

	return result


#============================================
def coerce_number(value: object) -> float | None:
	"""
	Convert raw input into a finite float.

	Args:
		value: Number or numeric string.

	Returns:
		Finite float, or None when the input is not a usable number.
	"""
	if isinstance(value, bool) or value is None:
		return None
	if isinstance(value, (int, float)):
		number = float(value)
	else:
		text = str(value).strip()
		if not text:
			return None
		try:
			number = float(text)
		except ValueError:
			return None
	if not math.isfinite(number):
		return None
	return number


#============================================
def field_from_wire(data: dict) -> Field:
	"""
	Build a Field from its stored dictionary shape.

	Args:
		data: Dict with id, label, x, y, width, height, fontSize, color, fontWeight.

	Returns:
		Field instance.
	"""
	field_id = data.get("id")
	if not isinstance(field_id, str) or not field_id:
		raise LayoutError(f"Layout field without a usable id: {data!r}")

	def number(key: str, default_value: float, floor: float) -> float:
		value = coerce_number(data.get(key))
		if value is None:
			return default_value
		return max(floor, value)

	weight = str(data.get("fontWeight", data.get("font_weight", "normal"))).lower()
	if weight not in FONT_WEIGHTS:
		weight = "normal"
	font_size = data.get("fontSize", data.get("font_size"))
	return Field(
		id=field_id,
		label=str(data.get("label") or field_id),
		x=number("x", 0.0, 0.0),
		y=number("y", 0.0, 0.0),
		width=number("width", MIN_FIELD_WIDTH, MIN_FIELD_WIDTH),
		height=number("height", MIN_FIELD_HEIGHT, MIN_FIELD_HEIGHT),
		font_size=max(1.0, coerce_number(font_size) or 24.0),
		color=str(data.get("color") or DEFAULT_TEXT_COLOR),
		font_weight=weight,
	)


#============================================
def fields_from_wire(items: list[dict]) -> list[Field]:
	"""
	Parse a stored field array.

	Args:
		items: List of field dictionaries.

	Returns:
		Field list with duplicate ids removed.
	"""
	return ensure_unique_ids([field_from_wire(item) for item in items])


#============================================
def field_to_wire(field: Field) -> dict:
	return {
		"id": field.id,
		"label": field.label,
		"x": field.x,
		"y": field.y,
		"width": field.width,
		"height": field.height,
		"fontSize": field.font_size,
		"color": field.color,
		"fontWeight": field.font_weight,
	}


def fields_to_wire(fields: list[Field]) -> list[dict]:
	return [field_to_wire(field) for field in fields]
