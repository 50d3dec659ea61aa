"""
Coupon settings: layout toggles, saved field list and template URL.
"""

# Standard Library
import dataclasses
import json
import logging
import pathlib

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config
import coupon_template_engine.layout


Field = cte.layout.Field
DEFAULT_TEMPLATE_URL = cte.config.DEFAULT_TEMPLATE_URL

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class CouponSettings:
	qr_enabled: bool = False
	amount_visible: bool | None = None
	template_elements: list[Field] | None = None
	background_template: str = DEFAULT_TEMPLATE_URL

	def layout_model(self) -> cte.layout.LayoutModel:
		"""
		Saved fields (or the stock set) reconciled against the toggles.
		"""
		if self.template_elements:
			fields = self.template_elements
		else:
			fields = cte.layout.default_fields()
		model = cte.layout.LayoutModel(fields, self.qr_enabled, self.amount_visible)
		return model.reconciled()


#============================================
def parse_flag(value: object) -> bool | None:
	"""
	Read a boolean that may be stored as text.

	Args:
		value: bool, "true"/"false", or None.

	Returns:
		Parsed flag, or None when absent.
	"""
	if value is None or value == "":
		return None
	if isinstance(value, bool):
		return value
	return str(value).strip().lower() in ("true", "1", "yes", "on")


#============================================
def settings_from_dict(data: dict) -> CouponSettings:
	"""
	Build settings from the stored key/value shape.

	Args:
		data: Dict with qrEnabled, amountVisible, templateElements, backgroundTemplate.

	Returns:
		CouponSettings.
	"""
	elements = data.get("templateElements")
	if isinstance(elements, str):
		try:
			elements = json.loads(elements)
		except ValueError:
			logger.warning("Ignoring unparseable templateElements value")
			elements = None
	fields = None
	if elements:
		fields = cte.layout.fields_from_wire(elements)
	return CouponSettings(
		qr_enabled=bool(parse_flag(data.get("qrEnabled"))),
		amount_visible=parse_flag(data.get("amountVisible")),
		template_elements=fields,
		background_template=str(data.get("backgroundTemplate") or DEFAULT_TEMPLATE_URL),
	)


def settings_to_dict(settings: CouponSettings) -> dict:
	data: dict = {
		"qrEnabled": settings.qr_enabled,
		"backgroundTemplate": settings.background_template,
	}
	if settings.amount_visible is not None:
		data["amountVisible"] = settings.amount_visible
	if settings.template_elements is not None:
		data["templateElements"] = cte.layout.fields_to_wire(settings.template_elements)
	return data


#============================================
def load_settings(path: pathlib.Path) -> CouponSettings:
	"""
	Load settings from a JSON file; a missing file yields defaults.

	Args:
		path: Settings JSON path.

	Returns:
		CouponSettings.
	"""
	if not path.exists():
		return CouponSettings()
	text = path.read_text(encoding="utf-8")
	return settings_from_dict(json.loads(text))


def save_settings(path: pathlib.Path, settings: CouponSettings) -> None:
	with path.open("w", encoding="utf-8") as handle:
		json.dump(settings_to_dict(settings), handle, indent=2, sort_keys=True, ensure_ascii=False)


#============================================
def save_layout(path: pathlib.Path, fields: list[Field]) -> None:
	"""
	Persist an edited field list into a settings file.

	Args:
		path: Settings JSON path.
		fields: Field list from the editor.
	"""
	settings = load_settings(path)
	settings.template_elements = [dataclasses.replace(field) for field in fields]
	save_settings(path, settings)
