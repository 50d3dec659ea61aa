"""
Template image loading.

Templates are addressed by URL: http(s), file://, a local path, a data URL,
or bare base64. Decoded images are cached per URL so a batch shares one
image object across every tile. A loader only publishes the image of the
most recent request; a load that is superseded while in flight is
cancelled and its result discarded.
"""

# Standard Library
import asyncio
import base64
import binascii
import io
import logging
import pathlib
import typing
import urllib.parse

# PIP3 modules
import aiohttp
import PIL.Image

# local repo modules
import coupon_template_engine as cte
import coupon_template_engine.config
import coupon_template_engine.errors


TEMPLATE_FETCH_TIMEOUT = cte.config.TEMPLATE_FETCH_TIMEOUT
DEFAULT_TEMPLATE_URL = cte.config.DEFAULT_TEMPLATE_URL
TemplateLoadError = cte.errors.TemplateLoadError

FetchFunction = typing.Callable[[str], typing.Awaitable[bytes]]

logger = logging.getLogger(__name__)


#============================================
def is_local_file(url: str) -> bool:
	# long base64 payloads raise ENAMETOOLONG instead of returning False
	try:
		return pathlib.Path(url).is_file()
	except OSError:
		return False


def event_loop_running() -> bool:
	try:
		asyncio.get_running_loop()
	except RuntimeError:
		return False
	return True


#============================================
async def fetch_template_bytes(url: str) -> bytes:
	"""
	Read raw template bytes from any supported URL form.

	Args:
		url: Template URL, path, data URL, or base64 text.

	Returns:
		Image file bytes.
	"""
	if not url:
		raise TemplateLoadError(url, "empty template URL")
	try:
		if url.startswith(("http://", "https://")):
			timeout = aiohttp.ClientTimeout(total=TEMPLATE_FETCH_TIMEOUT)
			async with aiohttp.ClientSession(timeout=timeout) as session:
				async with session.get(url) as response:
					response.raise_for_status()
					return await response.read()
		if url.startswith("file://"):
			path = pathlib.Path(urllib.parse.unquote(urllib.parse.urlparse(url).path))
			return path.read_bytes()
		if url.startswith("data:"):
			header, encoded = url.split(",", 1)
			if not header.endswith(";base64"):
				return urllib.parse.unquote_to_bytes(encoded)
			return base64.b64decode(encoded + "=" * (-len(encoded) % 4))
		if is_local_file(url):
			return pathlib.Path(url).read_bytes()
		padding = "=" * (-len(url) % 4)
		return base64.b64decode(url + padding, validate=True)
	except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError, binascii.Error) as error:
		raise TemplateLoadError(url, type(error).__name__) from error


#============================================
def decode_template(url: str, data: bytes) -> PIL.Image.Image:
	"""
	Decode template bytes into an RGB image.

	Args:
		url: Source URL, used for error messages.
		data: Image bytes.

	Returns:
		Fully loaded PIL image.
	"""
	try:
		image = PIL.Image.open(io.BytesIO(data))
		image.load()
	except (OSError, ValueError, PIL.Image.DecompressionBombError) as error:
		raise TemplateLoadError(url, f"undecodable image ({type(error).__name__})") from error
	return image.convert("RGB")


class TemplateLoader:
	"""
	Cached, last-requested-wins template loader.
	"""

	def __init__(self, fetch: FetchFunction | None = None):
		self._fetch = fetch or fetch_template_bytes
		self._cache: dict[str, PIL.Image.Image] = {}
		self._generation = 0
		self._task: asyncio.Task | None = None
		self.current_url: str | None = None
		self.image: PIL.Image.Image | None = None

	async def _load_uncached(self, url: str) -> PIL.Image.Image:
		data = await self._fetch(url)
		image = decode_template(url, data)
		self._cache[url] = image
		return image

	async def load(self, url: str) -> PIL.Image.Image | None:
		"""
		Load a template and publish it unless a newer request started.

		Args:
			url: Template URL.

		Returns:
			The image, or None when this request was superseded.
		"""
		self._generation += 1
		generation = self._generation
		if self._task is not None and not self._task.done():
			self._task.cancel()

		cached = self._cache.get(url)
		if cached is not None:
			self._task = None
			self.image = cached
			self.current_url = url
			return cached

		task = asyncio.ensure_future(self._load_uncached(url))
		self._task = task
		try:
			image = await task
		except asyncio.CancelledError:
			if generation != self._generation:
				logger.debug("Template load for %s superseded", url[:70])
				return None
			raise
		if generation != self._generation:
			logger.debug("Discarding stale template %s", url[:70])
			return None
		self.image = image
		self.current_url = url
		return image

	def load_sync(self, url: str) -> PIL.Image.Image | None:
		# asyncio.run refuses to start inside a running loop
		return asyncio.run(self.load(url))

	def cached(self, url: str) -> PIL.Image.Image | None:
		return self._cache.get(url)


#============================================
def load_template_image(
	url: str,
	fallback_url: str | None = DEFAULT_TEMPLATE_URL,
	loader: TemplateLoader | None = None,
) -> PIL.Image.Image:
	"""
	Load a template, substituting the fallback when the primary is unusable.

	Args:
		url: Primary template URL.
		fallback_url: URL to try when the primary fails; None disables it.
		loader: Loader to reuse (and share its cache); a new one by default.

	Returns:
		Loaded template image.
	"""
	if loader is None:
		loader = TemplateLoader()
	try:
		image = loader.load_sync(url)
	except TemplateLoadError as error:
		if not fallback_url or fallback_url == url:
			raise
		logger.warning("%s; using fallback template", error)
		image = loader.load_sync(fallback_url)
	if image is None:
		raise TemplateLoadError(url, "load superseded")
	return image
