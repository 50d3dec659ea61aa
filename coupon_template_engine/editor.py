"""
Interactive layout editor.

The editor owns a working copy of the layout, the preview surface and the
pointer gesture in progress. Pointer positions arrive in view space and are
mapped to template space before hit-testing, so stored coordinates never
depend on the zoom. Every change to fields, selection, zoom or template
redraws the preview.

Gesture transitions:

	IDLE --down on selected field's handle--> RESIZING
	IDLE --down inside a field--> DRAGGING (field becomes selected)
	IDLE --down on empty area--> IDLE
	DRAGGING/RESIZING --up or leave--> IDLE
"""

# Standard Library
import dataclasses
import enum
import logging
import math
import typing

# PIP3 modules
import PIL.Image
import PIL.ImageColor

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config
import coupon_template_engine.coords
import coupon_template_engine.errors
import coupon_template_engine.layout
import coupon_template_engine.preview
import coupon_template_engine.settings
import coupon_template_engine.template_image


Field = cte.layout.Field
LayoutModel = cte.layout.LayoutModel
CouponSettings = cte.settings.CouponSettings
TemplateLoader = cte.template_image.TemplateLoader
TemplateLoadError = cte.errors.TemplateLoadError

DEFAULT_ZOOM = cte.config.DEFAULT_ZOOM
RESIZE_HANDLE_SIZE = cte.config.RESIZE_HANDLE_SIZE
MIN_FIELD_WIDTH = cte.config.MIN_FIELD_WIDTH
MIN_FIELD_HEIGHT = cte.config.MIN_FIELD_HEIGHT
MIN_FONT_SIZE = cte.config.MIN_FONT_SIZE

# property name -> lower bound
NUMERIC_PROPERTIES = {
	"x": 0.0,
	"y": 0.0,
	"width": MIN_FIELD_WIDTH,
	"height": MIN_FIELD_HEIGHT,
	"font_size": MIN_FONT_SIZE,
}

SaveCallback = typing.Callable[[list[Field]], None]

logger = logging.getLogger(__name__)


class GestureState(enum.Enum):
	IDLE = "idle"
	DRAGGING = "dragging"
	RESIZING = "resizing"


@dataclasses.dataclass
class Gesture:
	state: GestureState = GestureState.IDLE
	field_id: str | None = None
	anchor_x: float = 0.0
	anchor_y: float = 0.0


#============================================
def hit_test(fields: list[Field], x: float, y: float) -> Field | None:
	"""
	Find the field under a template-space point.

	Earlier fields win over later ones.

	Args:
		fields: Field list.
		x: Template-space x.
		y: Template-space y.

	Returns:
		First field containing the point, or None.
	"""
	for field in fields:
		if field.contains(x, y):
			return field
	return None


def finite_point(x: float, y: float) -> bool:
	return math.isfinite(x) and math.isfinite(y)


def handle_contains(field: Field, x: float, y: float) -> bool:
	right = field.x + field.width
	bottom = field.y + field.height
	return right - RESIZE_HANDLE_SIZE <= x <= right and bottom - RESIZE_HANDLE_SIZE <= y <= bottom


class TemplateEditor:
	"""
	Editing session for one layout.
	"""

	def __init__(
		self,
		settings: CouponSettings | None = None,
		on_save: SaveCallback | None = None,
		loader: TemplateLoader | None = None,
	):
		if settings is None:
			settings = CouponSettings()
		self.qr_enabled = settings.qr_enabled
		self.amount_visible = settings.amount_visible
		self.fields = settings.layout_model().fields
		self.selected_id: str | None = None
		if cte.layout.find_field(self.fields, "name") is not None:
			self.selected_id = "name"
		self.gesture = Gesture()
		self.zoom = DEFAULT_ZOOM
		self.edit_mode = False
		self.surface = cte.preview.PreviewSurface()
		self.loader = loader or TemplateLoader()
		self._on_save = on_save
		self.redraw()

	#============================================
	@property
	def selected(self) -> Field | None:
		return cte.layout.find_field(self.fields, self.selected_id)

	def layout_model(self) -> LayoutModel:
		return LayoutModel(list(self.fields), self.qr_enabled, self.amount_visible)

	def redraw(self) -> None:
		self.surface.redraw(self.fields, self.selected_id, self.zoom)

	def _set_fields(self, fields: list[Field]) -> None:
		self.fields = fields
		if cte.layout.find_field(self.fields, self.selected_id) is None:
			self.selected_id = None
		if cte.layout.find_field(self.fields, self.gesture.field_id) is None:
			self.gesture = Gesture()
		self.redraw()

	def _replace_field(self, field_id: str, **changes) -> None:
		updated = []
		for field in self.fields:
			if field.id == field_id:
				field = dataclasses.replace(field, **changes)
			updated.append(field)
		self._set_fields(updated)

	#============================================
	def apply_settings(self, settings: CouponSettings) -> None:
		"""
		Take new toggles or a new saved field list from outside.

		A non-empty saved field list replaces the working fields; otherwise
		the working fields are kept. Either way the toggles are reconciled.

		Args:
			settings: Updated settings.
		"""
		self.qr_enabled = settings.qr_enabled
		self.amount_visible = settings.amount_visible
		fields = self.fields
		if settings.template_elements:
			fields = settings.template_elements
		self._set_fields(cte.layout.reconcile_fields(fields, self.qr_enabled, self.amount_visible))

	def set_qr_enabled(self, enabled: bool) -> None:
		self.qr_enabled = enabled
		self._set_fields(cte.layout.reconcile_fields(self.fields, self.qr_enabled, self.amount_visible))

	def set_amount_visible(self, visible: bool | None) -> None:
		self.amount_visible = visible
		self._set_fields(cte.layout.reconcile_fields(self.fields, self.qr_enabled, self.amount_visible))

	#============================================
	def set_template_image(self, image: PIL.Image.Image | None) -> None:
		self.surface.set_template(image)
		self.redraw()

	def load_template(self, url: str, fallback_url: str | None = None) -> bool:
		"""
		Load the preview template without ever raising.

		This blocks until the load finishes. Code already running inside an
		event loop must await load_template_async instead; called from there,
		this logs a warning and loads nothing.

		Args:
			url: Template URL.
			fallback_url: Optional URL tried when the primary fails.

		Returns:
			True when a template was loaded and drawn.
		"""
		if cte.template_image.event_loop_running():
			logger.warning("load_template called inside an event loop; use load_template_async")
			return False
		for candidate in (url, fallback_url):
			if not candidate:
				continue
			try:
				image = self.loader.load_sync(candidate)
			except TemplateLoadError as error:
				logger.warning("Failed to load template: %s", error)
				continue
			if image is None:
				return False
			self.set_template_image(image)
			return True
		return False

	async def load_template_async(self, url: str) -> bool:
		"""
		Load the preview template inside a running event loop.

		A newer call supersedes an older one still in flight; only the
		newest image is drawn.

		Args:
			url: Template URL.

		Returns:
			True when this request's image was drawn.
		"""
		try:
			image = await self.loader.load(url)
		except TemplateLoadError as error:
			logger.warning("Failed to load template: %s", error)
			return False
		if image is None:
			return False
		self.set_template_image(image)
		return True

	#============================================
	def set_edit_mode(self, enabled: bool) -> None:
		self.edit_mode = enabled
		if not enabled:
			self.gesture = Gesture()

	def set_zoom(self, zoom: float) -> None:
		self.zoom = cte.coords.snap_zoom(zoom)
		self.redraw()

	def select(self, field_id: str) -> bool:
		if cte.layout.find_field(self.fields, field_id) is None:
			return False
		self.selected_id = field_id
		self.redraw()
		return True

	#============================================
	def pointer_down(self, view_x: float, view_y: float) -> GestureState:
		"""
		Start a gesture at a view-space point.

		Args:
			view_x: Pointer x in view pixels.
			view_y: Pointer y in view pixels.

		Returns:
			Gesture state after the event.
		"""
		if not self.edit_mode or not finite_point(view_x, view_y):
			return self.gesture.state
		x, y = cte.coords.point_to_template((view_x, view_y), self.zoom)

		selected = self.selected
		if selected is not None and handle_contains(selected, x, y):
			self.gesture = Gesture(GestureState.RESIZING, selected.id)
			return self.gesture.state

		field = hit_test(self.fields, x, y)
		if field is None:
			return self.gesture.state
		self.selected_id = field.id
		self.gesture = Gesture(GestureState.DRAGGING, field.id, x - field.x, y - field.y)
		self.redraw()
		return self.gesture.state

	def pointer_move(self, view_x: float, view_y: float) -> None:
		"""
		Continue the current gesture.

		Args:
			view_x: Pointer x in view pixels.
			view_y: Pointer y in view pixels.
		"""
		if not self.edit_mode or self.gesture.state is GestureState.IDLE:
			return
		if not finite_point(view_x, view_y):
			logger.debug("Ignoring pointer at (%r, %r)", view_x, view_y)
			return
		field = cte.layout.find_field(self.fields, self.gesture.field_id)
		if field is None:
			self.gesture = Gesture()
			return
		x, y = cte.coords.point_to_template((view_x, view_y), self.zoom)
		if self.gesture.state is GestureState.DRAGGING:
			self._replace_field(
				field.id,
				x=max(0.0, x - self.gesture.anchor_x),
				y=max(0.0, y - self.gesture.anchor_y),
			)
		else:
			self._replace_field(
				field.id,
				width=max(MIN_FIELD_WIDTH, x - field.x),
				height=max(MIN_FIELD_HEIGHT, y - field.y),
			)

	def pointer_up(self) -> None:
		self.gesture = Gesture()

	def pointer_leave(self) -> None:
		self.gesture = Gesture()

	#============================================
	def set_property(self, name: str, raw_value: object) -> bool:
		"""
		Apply a numeric edit from the property panel to the selected field.

		Args:
			name: One of x, y, width, height, font_size.
			raw_value: Number or text as typed.

		Returns:
			True when the field changed; invalid input is ignored.
		"""
		selected = self.selected
		if selected is None:
			return False
		if name not in NUMERIC_PROPERTIES:
			raise KeyError(f"Not an editable numeric property: {name}")
		value = cte.layout.coerce_number(raw_value)
		if value is None:
			logger.info("Ignoring non-numeric %s value %r", name, raw_value)
			return False
		value = max(NUMERIC_PROPERTIES[name], value)
		self._replace_field(selected.id, **{name: value})
		return True

	def set_color(self, raw_value: str) -> bool:
		selected = self.selected
		if selected is None or not isinstance(raw_value, str):
			return False
		try:
			red, green, blue = PIL.ImageColor.getrgb(raw_value)[:3]
		except ValueError:
			logger.info("Ignoring invalid color %r", raw_value)
			return False
		self._replace_field(selected.id, color=f"#{red:02x}{green:02x}{blue:02x}")
		return True

	#============================================
	def save(self) -> list[Field]:
		"""
		Hand the current fields to the save callback.

		Returns:
			Copies of the saved fields.
		"""
		fields = [dataclasses.replace(field) for field in self.fields]
		if self._on_save is not None:
			self._on_save(fields)
		return fields
