import asyncio
import pathlib

import PIL.Image

import coupon_template_engine.editor as editor
import coupon_template_engine.layout as layout
import coupon_template_engine.settings as settings


Field = layout.Field
GestureState = editor.GestureState


#============================================
def build_editor(**kwargs) -> editor.TemplateEditor:
	"""
	Build an editor in edit mode at the default zoom of 0.5.
	"""
	session = editor.TemplateEditor(settings.CouponSettings(**kwargs))
	session.set_edit_mode(True)
	return session


#============================================
def test_initial_state() -> None:
	"""
	A fresh editor has the stock fields, name selected and no preview.
	"""
	session = editor.TemplateEditor()
	assert [field.id for field in session.fields] == ["name", "empId", "date", "serial", "amount"]
	assert session.selected_id == "name"
	assert session.zoom == 0.5
	assert session.edit_mode is False
	assert session.gesture.state is GestureState.IDLE
	assert session.surface.image is None


#============================================
def test_drag_moves_field_in_template_space() -> None:
	"""
	Dragging converts view deltas to template space and keeps the anchor.
	"""
	session = build_editor()
	# center of the empId field (220, 398, 300, 50) at zoom 0.5
	state = session.pointer_down(185.0, 211.5)
	assert state is GestureState.DRAGGING
	assert session.selected_id == "empId"
	assert (session.gesture.anchor_x, session.gesture.anchor_y) == (150.0, 25.0)

	session.pointer_move(300.0, 200.0)
	field = session.selected
	assert (field.x, field.y) == (450.0, 375.0)

	session.pointer_up()
	assert session.gesture.state is GestureState.IDLE
	assert session.selected_id == "empId"


#============================================
def test_drag_clamps_at_origin_only() -> None:
	"""
	Dragging never goes below zero but may leave the template on the far side.
	"""
	session = build_editor()
	session.pointer_down(195.5, 175.5)
	session.pointer_move(0.0, 0.0)
	assert (session.selected.x, session.selected.y) == (0.0, 0.0)

	session.pointer_move(5000.0, 5000.0)
	assert session.selected.x > 1048
	assert session.selected.y > 598


#============================================
def test_resize_from_handle_with_floor() -> None:
	"""
	The handle of the selected field starts a resize floored at 50 x 30.
	"""
	session = build_editor()
	# name field bottom-right corner is (541, 376); handle covers the last 8 units
	state = session.pointer_down(268.5, 186.0)
	assert state is GestureState.RESIZING

	session.pointer_move(10.0, 10.0)
	assert (session.selected.width, session.selected.height) == (50.0, 30.0)

	session.pointer_move(400.0, 250.0)
	assert (session.selected.width, session.selected.height) == (559.0, 174.0)
	assert (session.selected.x, session.selected.y) == (241, 326)

	session.pointer_leave()
	assert session.gesture.state is GestureState.IDLE


#============================================
def test_pointer_ignored_outside_edit_mode() -> None:
	"""
	Pointer gestures do nothing until edit mode is on.
	"""
	session = editor.TemplateEditor()
	before = [field.x for field in session.fields]
	assert session.pointer_down(195.5, 175.5) is GestureState.IDLE
	session.pointer_move(10.0, 10.0)
	assert [field.x for field in session.fields] == before


#============================================
def test_empty_area_keeps_selection() -> None:
	"""
	Pressing on empty template area neither selects nor starts a gesture.
	"""
	session = build_editor()
	session.select("date")
	assert session.pointer_down(1.0, 1.0) is GestureState.IDLE
	assert session.selected_id == "date"


#============================================
def test_earlier_field_wins_hit_test() -> None:
	"""
	Overlapping fields resolve to the first one in list order.
	"""
	fields = [
		Field("first", "First", 100, 100, 200, 100),
		Field("second", "Second", 150, 150, 200, 100),
	]
	session = build_editor(template_elements=fields, amount_visible=False)
	session.pointer_down(100.0, 100.0)
	assert session.selected_id == "first"


#============================================
def test_zero_fields(template_image: PIL.Image.Image) -> None:
	"""
	An editor without fields draws a bare template and selects nothing.
	"""
	only_amount = [layout.default_amount_field()]
	session = build_editor(template_elements=only_amount, amount_visible=False)
	assert session.fields == []
	assert session.selected_id is None
	session.set_template_image(template_image)
	assert session.pointer_down(200.0, 200.0) is GestureState.IDLE
	assert session.selected_id is None
	assert session.surface.image.size == (524, 299)
	assert len(session.surface.image.getcolors()) == 1


#============================================
def test_every_change_redraws(template_image: PIL.Image.Image) -> None:
	"""
	Field, selection and zoom changes each trigger a redraw.
	"""
	session = build_editor()
	session.set_template_image(template_image)
	count = session.surface.redraw_count

	session.select("serial")
	session.set_zoom(1.0)
	assert session.surface.image.size == (1048, 598)
	session.set_property("x", 10)
	assert session.surface.redraw_count == count + 3


#============================================
def test_zoom_is_snapped() -> None:
	"""
	Requested zoom snaps into the editor's steps.
	"""
	session = build_editor()
	session.set_zoom(0.8)
	assert session.zoom == 0.75
	session.set_zoom(9)
	assert session.zoom == 1.5


#============================================
def test_numeric_edits_reject_bad_input() -> None:
	"""
	Non-numeric or non-finite edits leave the field as it was.
	"""
	session = build_editor()
	assert session.set_property("x", "abc") is False
	assert session.set_property("y", "nan") is False
	assert session.set_property("font_size", float("inf")) is False
	assert session.selected.x == 241
	assert session.selected.y == 326

	assert session.set_property("x", "120") is True
	assert session.selected.x == 120.0
	assert session.set_property("width", 10) is True
	assert session.selected.width == 50.0


#============================================
def test_numeric_edit_needs_selection() -> None:
	"""
	The property panel only edits the selected field.
	"""
	fields = [Field("logo", "Logo", 10, 10, 100, 100)]
	session = build_editor(template_elements=fields, amount_visible=False)
	assert session.selected_id is None
	assert session.set_property("x", 40) is False
	assert session.fields[0].x == 10


#============================================
def test_color_edits() -> None:
	"""
	Colors are normalized; invalid colors are ignored.
	"""
	session = build_editor()
	assert session.set_color("#00FF00") is True
	assert session.selected.color == "#00ff00"
	assert session.set_color("not-a-color") is False
	assert session.selected.color == "#00ff00"


#============================================
def test_toggle_changes_reconcile() -> None:
	"""
	Flipping qr on adds the default qr field; amount off removes amount.
	"""
	session = build_editor()
	session.set_qr_enabled(True)
	qr = layout.find_field(session.fields, "qr")
	assert (qr.x, qr.y, qr.width, qr.height) == (800, 400, 150, 150)
	assert len(session.fields) == 6

	session.select("amount")
	session.set_amount_visible(False)
	assert layout.find_field(session.fields, "amount") is None
	assert session.selected_id is None


#============================================
def test_external_settings_replace_fields() -> None:
	"""
	A new saved field list replaces the working copy and is reconciled.
	"""
	session = build_editor()
	session.set_property("x", 5)
	incoming = settings.CouponSettings(
		qr_enabled=True,
		template_elements=[Field("name", "Name", 1, 2, 100, 40)],
	)
	session.apply_settings(incoming)
	assert [field.id for field in session.fields] == ["name", "qr", "amount"]
	assert session.fields[0].x == 1


#============================================
def test_save_hands_fields_to_callback() -> None:
	"""
	Save passes copies of the current fields to the callback.
	"""
	received: list[list[Field]] = []
	session = editor.TemplateEditor(on_save=received.append)
	session.set_edit_mode(True)
	session.set_property("x", 300)
	saved = session.save()
	assert received == [saved]
	assert saved[0].x == 300
	saved[0].x = 0
	assert session.fields[0].x == 300


#============================================
def test_template_load_failure_does_not_raise(template_path: pathlib.Path) -> None:
	"""
	A bad template URL leaves the preview undrawn; the fallback recovers.
	"""
	session = build_editor()
	assert session.load_template("/no/such/template.png") is False
	assert session.surface.image is None

	assert session.load_template("/no/such/template.png", str(template_path)) is True
	assert session.surface.image.size == (524, 299)


#============================================
def test_selected_field_is_highlighted(template_image: PIL.Image.Image) -> None:
	"""
	The selected field's outline uses the highlight color.
	"""
	session = build_editor()
	session.set_template_image(template_image)
	image = session.surface.image
	# top edge of the name box at zoom 0.5
	assert image.getpixel((150, 163)) == (249, 115, 22)
	# top edge of the unselected empId box
	assert image.getpixel((150, 199)) == (203, 213, 225)


#============================================
def test_non_finite_pointer_is_ignored() -> None:
	"""
	Infinite or NaN pointer positions neither start nor move a gesture.
	"""
	session = build_editor()
	assert session.pointer_down(float("nan"), 175.5) is GestureState.IDLE

	session.pointer_down(195.5, 175.5)
	session.pointer_move(float("inf"), 200.0)
	session.pointer_move(100.0, float("nan"))
	assert (session.selected.x, session.selected.y) == (241, 326)
	assert session.gesture.state is GestureState.DRAGGING


#============================================
def test_blocking_load_inside_event_loop(template_path: pathlib.Path) -> None:
	"""
	The blocking loader refuses politely inside a running loop; the async one works.
	"""
	session = build_editor()

	async def scenario() -> tuple[bool, bool]:
		blocking = session.load_template(str(template_path))
		awaited = await session.load_template_async(str(template_path))
		return blocking, awaited

	assert asyncio.run(scenario()) == (False, True)
	assert session.surface.image.size == (524, 299)
