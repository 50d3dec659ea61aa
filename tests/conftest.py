"""
Pytest configuration for local imports and shared fixtures.
"""

# Standard Library
import io
import os
import sys

# PIP3 modules
import PIL.Image
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

TEMPLATE_COLOR = (200, 180, 120)


#============================================
def png_bytes(color: tuple[int, int, int], size: tuple[int, int] = (1048, 598)) -> bytes:
	"""
	Encode a solid color image as PNG bytes.

	Args:
		color: Fill color.
		size: Image size.

	Returns:
		PNG file bytes.
	"""
	buffer = io.BytesIO()
	PIL.Image.new("RGB", size, color).save(buffer, format="PNG")
	return buffer.getvalue()


@pytest.fixture
def template_image() -> PIL.Image.Image:
	return PIL.Image.new("RGB", (1048, 598), TEMPLATE_COLOR)


@pytest.fixture
def template_path(tmp_path):
	path = tmp_path / "template.png"
	path.write_bytes(png_bytes(TEMPLATE_COLOR))
	return path


@pytest.fixture
def make_png():
	return png_bytes
