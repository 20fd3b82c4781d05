from __future__ import annotations

from fractions import Fraction
from typing import Any, Optional

from PIL.TiffImagePlugin import IFDRational


_PRINTABLE = set(range(0x20, 0x7F)) | {0x09, 0x0A, 0x0D}


def image_container(body: bytes) -> Optional[str]:
	if body[:2] == b"\xff\xd8":
		return "jpeg"
	if body[:4] in (b"II\x2a\x00", b"MM\x00\x2a"):
		return "tiff"
	if body[:4] == b"RIFF" and body[8:12] == b"WEBP":
		return "webp"
	return None


def rational_to_str(num: int, den: int) -> str:
	return f"{num}/{den}"


def bytes_to_str(v: bytes) -> str:
	data = v.rstrip(b"\x00")
	if all(b in _PRINTABLE for b in data):
		return data.decode("ascii")
	return "[" + ",".join(str(b) for b in data) + "]"


def render_value(v: Any) -> str:
	if v is None:
		return ""
	if isinstance(v, str):
		return v.rstrip("\x00")
	if isinstance(v, bytes):
		return bytes_to_str(v)
	if isinstance(v, IFDRational):
		return rational_to_str(v.numerator, v.denominator)
	if isinstance(v, Fraction):
		return rational_to_str(v.numerator, v.denominator)
	if isinstance(v, float):
		return repr(v)
	if isinstance(v, int):
		return str(int(v))
	if isinstance(v, (tuple, list)):
		if len(v) == 1:
			return render_value(v[0])
		return "[" + ",".join(render_value(x) for x in v) + "]"
	return str(v)
