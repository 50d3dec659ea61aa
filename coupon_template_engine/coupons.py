"""
Entry points used by the surrounding application.
"""

# PIP3 modules
import PIL.Image

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config
import coupon_template_engine.paginate
import coupon_template_engine.records
import coupon_template_engine.render
import coupon_template_engine.settings
import coupon_template_engine.template_image


CouponRecord = cte.records.CouponRecord
CouponSettings = cte.settings.CouponSettings
SheetConfig = cte.config.SheetConfig
TemplateLoader = cte.template_image.TemplateLoader

DEFAULT_TEMPLATE_URL = cte.config.DEFAULT_TEMPLATE_URL
DEFAULT_DENSITY = cte.config.DEFAULT_DENSITY


#============================================
def render_coupon(
	record: CouponRecord,
	settings: CouponSettings,
	template_url: str,
	loader: TemplateLoader | None = None,
	fallback_url: str | None = DEFAULT_TEMPLATE_URL,
) -> PIL.Image.Image:
	"""
	Render one coupon for preview or single print.

	Args:
		record: Coupon record.
		settings: Coupon settings (toggles and saved layout).
		template_url: Template image URL.
		loader: Optional shared loader.
		fallback_url: Template used when template_url cannot be loaded.

	Returns:
		Coupon image at the native design size.
	"""
	template = cte.template_image.load_template_image(template_url, fallback_url, loader)
	return cte.render.render_coupon_image(record, settings.layout_model(), template)


#============================================
def render_multiple_coupons_a4(
	records: list[CouponRecord],
	settings: CouponSettings,
	template_url: str,
	per_page: int = DEFAULT_DENSITY,
	config: SheetConfig | None = None,
	loader: TemplateLoader | None = None,
	fallback_url: str | None = DEFAULT_TEMPLATE_URL,
) -> list[PIL.Image.Image]:
	"""
	Render records as tiled A4 sheets.

	Args:
		records: Records in print order.
		settings: Coupon settings.
		template_url: Template image URL, loaded once for every tile.
		per_page: Coupons per sheet; unsupported values snap to the nearest density.
		config: Sheet configuration.
		loader: Optional shared loader.
		fallback_url: Template used when template_url cannot be loaded.

	Returns:
		One image per sheet; empty when there are no records.
	"""
	if not records:
		return []
	template = cte.template_image.load_template_image(template_url, fallback_url, loader)
	return cte.paginate.render_sheets(records, settings.layout_model(), template, per_page, config)
