"""
Editor preview surface.
"""

# Standard Library
import logging

# PIP3 modules
import PIL.Image
import PIL.ImageDraw

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config
import coupon_template_engine.coords
import coupon_template_engine.layout
import coupon_template_engine.render


Field = cte.layout.Field

QR_FIELD_ID = cte.config.QR_FIELD_ID
RESIZE_HANDLE_SIZE = cte.config.RESIZE_HANDLE_SIZE
EDITOR_LABEL_FONT_SIZE = cte.config.EDITOR_LABEL_FONT_SIZE
DEFAULT_FONT_REGULAR = cte.config.DEFAULT_FONT_REGULAR
PREVIEW_BACKGROUND = cte.config.PREVIEW_BACKGROUND
PREVIEW_OUTLINE_COLOR = cte.config.PREVIEW_OUTLINE_COLOR
PREVIEW_SELECTED_COLOR = cte.config.PREVIEW_SELECTED_COLOR
PREVIEW_LABEL_COLOR = cte.config.PREVIEW_LABEL_COLOR
PREVIEW_QR_TINT = cte.config.PREVIEW_QR_TINT
PREVIEW_QR_PATTERN_COLOR = cte.config.PREVIEW_QR_PATTERN_COLOR
PREVIEW_LINE_WIDTH = cte.config.PREVIEW_LINE_WIDTH
PREVIEW_SELECTED_LINE_WIDTH = cte.config.PREVIEW_SELECTED_LINE_WIDTH

logger = logging.getLogger(__name__)


#============================================
def draw_qr_placeholder(image: PIL.Image.Image, box: tuple[float, float, float, float]) -> None:
	"""
	Fill a box with a scan-code-like placeholder pattern.

	Args:
		image: RGBA preview surface.
		box: (x, y, width, height) in view pixels.
	"""
	x, y, width, height = box
	overlay = PIL.Image.new("RGBA", image.size, (0, 0, 0, 0))
	PIL.ImageDraw.Draw(overlay).rectangle((x, y, x + width, y + height), fill=PREVIEW_QR_TINT)
	image.alpha_composite(overlay)

	draw = PIL.ImageDraw.Draw(image)
	cell = width / 5.0
	corners = (
		(x + cell, y + cell),
		(x + width - 2.0 * cell, y + cell),
		(x + cell, y + height - 2.0 * cell),
		(x + width / 2.0 - cell / 2.0, y + height / 2.0 - cell / 2.0),
	)
	for corner_x, corner_y in corners:
		draw.rectangle((corner_x, corner_y, corner_x + cell, corner_y + cell), fill=PREVIEW_QR_PATTERN_COLOR)


class PreviewSurface:
	"""
	The editor's drawing surface, redrawn in full on every change.

	The image stays None until a template has been supplied.
	"""

	def __init__(self):
		self.template: PIL.Image.Image | None = None
		self.image: PIL.Image.Image | None = None
		self.redraw_count = 0

	def set_template(self, template: PIL.Image.Image | None) -> None:
		self.template = template

	def redraw(self, fields: list[Field], selected_id: str | None, zoom: float) -> None:
		"""
		Clear and redraw the template with field overlays.

		Args:
			fields: Fields in template space.
			selected_id: Currently selected field id.
			zoom: View zoom.
		"""
		self.redraw_count += 1
		if self.template is None:
			self.image = None
			return

		size = cte.coords.surface_size(zoom)
		scaled_size = (
			max(1, round(cte.config.TEMPLATE_WIDTH * zoom)),
			max(1, round(cte.config.TEMPLATE_HEIGHT * zoom)),
		)
		surface = PIL.Image.new("RGBA", size, PREVIEW_BACKGROUND)
		surface.paste(self.template.convert("RGB").resize(scaled_size, PIL.Image.Resampling.BILINEAR), (0, 0))

		label_font = cte.render.load_font(DEFAULT_FONT_REGULAR, EDITOR_LABEL_FONT_SIZE)
		for field in fields:
			selected = field.id == selected_id
			x = cte.coords.to_view(field.x, zoom)
			y = cte.coords.to_view(field.y, zoom)
			width = cte.coords.to_view(field.width, zoom)
			height = cte.coords.to_view(field.height, zoom)

			if field.id == QR_FIELD_ID:
				draw_qr_placeholder(surface, (x, y, width, height))

			draw = PIL.ImageDraw.Draw(surface)
			draw.rectangle(
				(x, y, x + width, y + height),
				outline=PREVIEW_SELECTED_COLOR if selected else PREVIEW_OUTLINE_COLOR,
				width=PREVIEW_SELECTED_LINE_WIDTH if selected else PREVIEW_LINE_WIDTH,
			)
			# labels stay at a fixed size at every zoom
			draw.text(
				(x + 5.0, y - 5.0),
				field.label,
				font=label_font,
				fill=PREVIEW_SELECTED_COLOR if selected else PREVIEW_LABEL_COLOR,
				anchor="ls",
			)
			if selected:
				handle = cte.coords.to_view(RESIZE_HANDLE_SIZE, zoom)
				draw.rectangle(
					(x + width - handle, y + height - handle, x + width, y + height),
					fill=PREVIEW_SELECTED_COLOR,
				)

		self.image = surface.convert("RGB")
