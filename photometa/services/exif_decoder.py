from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import piexif

from photometa.services.errors import DecodeFailure
from photometa.services.image_utils import bytes_to_str, image_container, rational_to_str, render_value
from photometa.services.makernotes import DEFAULT_REGISTRY, MakerNoteRegistry
from photometa.services.records import MetadataField, strip_quotes

log = logging.getLogger("photometa.exif")

WALKED_IFDS = ("0th", "Exif", "GPS", "Interop")

# IFD pointers are structure, not metadata
POINTER_TAGS = {
	piexif.ImageIFD.ExifTag,
	piexif.ImageIFD.GPSTag,
	piexif.ExifIFD.InteroperabilityTag,
}

# Windows XPTitle, XPComment, XPAuthor, XPKeywords, XPSubject
XP_TAGS = {0x9C9B, 0x9C9C, 0x9C9D, 0x9C9E, 0x9C9F}

_RATIONAL_TYPES = (piexif.TYPES.Rational, piexif.TYPES.SRational)


def _decode_xp(v: Any) -> str:
	data = bytes(v) if not isinstance(v, bytes) else v
	return data.decode("utf-16-le", errors="replace").rstrip("\x00")


def _decode_user_comment(v: bytes) -> str:
	code, text = v[:8], v[8:]
	if code.startswith(b"UNICODE"):
		return text.decode("utf-16-le" if text[:1] != b"\x00" else "utf-16-be", errors="replace").rstrip("\x00")
	if code.startswith(b"ASCII") or code == b"\x00" * 8:
		return text.decode("ascii", errors="replace").rstrip("\x00 ")
	return bytes_to_str(v)


def _rational_value(value: Any) -> Optional[str]:
	# the file may store a RATIONAL-typed tag with some other type
	if not isinstance(value, tuple):
		return None
	if not value:
		return ""
	if all(isinstance(v, tuple) and len(v) == 2 for v in value):
		return "[" + ",".join(rational_to_str(n, d) for n, d in value) + "]"
	if len(value) == 2 and all(isinstance(v, int) for v in value):
		return rational_to_str(*value)
	return None


def _tag_value(ifd: str, tag: int, value: Any) -> str:
	if tag in XP_TAGS:
		return _decode_xp(value)
	if ifd == "Exif" and tag == piexif.ExifIFD.UserComment and isinstance(value, bytes):
		return _decode_user_comment(value)
	typ = piexif.TAGS[ifd].get(tag, {}).get("type")
	if typ in _RATIONAL_TYPES:
		text = _rational_value(value)
		if text is not None:
			return text
	if isinstance(value, bytes) and typ == piexif.TYPES.Ascii:
		return value.decode("utf-8", errors="replace").rstrip("\x00")
	return render_value(value)


def _tag_name(ifd: str, tag: int) -> Optional[str]:
	info = piexif.TAGS[ifd].get(tag)
	return info["name"] if info else None


def load_exif(body: bytes) -> Dict[str, Any]:
	if image_container(body) is None:
		raise DecodeFailure("EXIF", "not a recognized image container")
	try:
		return piexif.load(body)
	except Exception as e:
		# piexif reports corrupt IFDs with whatever error the bad bytes provoke
		raise DecodeFailure("EXIF", str(e) or type(e).__name__) from e


def decode_exif(body: bytes, makernotes: MakerNoteRegistry = DEFAULT_REGISTRY) -> List[MetadataField]:
	exif = load_exif(body)
	fields: List[MetadataField] = []
	vendor_fields: List[MetadataField] = []
	for ifd in WALKED_IFDS:
		tags = exif.get(ifd) or {}
		for tag in sorted(tags):
			value = tags[tag]
			name = _tag_name(ifd, tag)
			if value is None or name is None:
				log.debug("skipping null EXIF tag %s/0x%04x", ifd, tag)
				continue
			if tag in POINTER_TAGS:
				continue
			if ifd == "Exif" and tag == piexif.ExifIFD.MakerNote:
				if isinstance(value, bytes):
					vendor_fields.extend(makernotes.decode(value))
				continue
			try:
				text = _tag_value(ifd, tag, value)
			except (TypeError, ValueError, IndexError, OverflowError) as e:
				raise DecodeFailure("EXIF", f"{name}: {e}") from e
			fields.append(MetadataField(name, strip_quotes(text)))
	return fields + vendor_fields
