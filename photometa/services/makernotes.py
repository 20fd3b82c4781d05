from __future__ import annotations

import io
import logging
import struct
from typing import Dict, List, Tuple

from PIL.TiffImagePlugin import ImageFileDirectory_v2

from photometa.services.image_utils import render_value
from photometa.services.logs import log_event
from photometa.services.records import MetadataField, strip_quotes

log = logging.getLogger("photometa.makernotes")


NIKON_TAGS: Dict[int, str] = {
	0x0001: "MakerNoteVersion",
	0x0002: "ISO",
	0x0003: "ColorMode",
	0x0004: "Quality",
	0x0005: "WhiteBalance",
	0x0006: "Sharpness",
	0x0007: "FocusMode",
	0x0008: "FlashSetting",
	0x0009: "FlashType",
	0x000B: "WhiteBalanceFineTune",
	0x000C: "WB_RBLevels",
	0x000D: "ProgramShift",
	0x000E: "ExposureDifference",
	0x0012: "FlashExposureComp",
	0x0013: "ISOSetting",
	0x0016: "ImageBoundary",
	0x0019: "ExposureBracketValue",
	0x001D: "SerialNumber",
	0x0080: "ImageAdjustment",
	0x0081: "ToneComp",
	0x0082: "AuxiliaryLens",
	0x0083: "LensType",
	0x0084: "Lens",
	0x0085: "ManualFocusDistance",
	0x0086: "DigitalZoom",
	0x0087: "FlashMode",
	0x0089: "ShootingMode",
	0x008B: "LensFStops",
	0x0092: "HueAdjustment",
	0x0095: "NoiseReduction",
	0x00A7: "ShutterCount",
	0x00A9: "ImageOptimization",
	0x00AA: "Saturation",
}

FUJIFILM_TAGS: Dict[int, str] = {
	0x0000: "Version",
	0x0010: "InternalSerialNumber",
	0x1000: "Quality",
	0x1001: "Sharpness",
	0x1002: "WhiteBalance",
	0x1003: "Saturation",
	0x1004: "Contrast",
	0x1010: "FlashMode",
	0x1011: "FlashExposureComp",
	0x1020: "Macro",
	0x1021: "FocusMode",
	0x1030: "SlowSync",
	0x1031: "PictureMode",
	0x1100: "AutoBracketing",
	0x1300: "BlurWarning",
	0x1301: "FocusWarning",
	0x1302: "ExposureWarning",
	0x1401: "DynamicRange",
	0x1404: "MinFocalLength",
	0x1405: "MaxFocalLength",
}

APPLE_TAGS: Dict[int, str] = {
	0x0001: "MakerNoteVersion",
	0x0008: "AccelerationVector",
	0x000A: "HDRImageType",
	0x000B: "BurstUUID",
	0x0011: "ContentIdentifier",
	0x0014: "ImageCaptureType",
	0x0015: "ImageUniqueID",
	0x0017: "LivePhotoVideoIndex",
}


class MakerNoteParser:
	vendor = ""
	header = b""
	tags: Dict[int, str] = {}

	def accepts(self, blob: bytes) -> bool:
		return blob.startswith(self.header)

	def locate(self, blob: bytes) -> Tuple[bytes, bytes]:
		"""Return (tiff_header, data) where IFD offsets are relative to data."""
		raise NotImplementedError

	def field_name(self, tag: int) -> str:
		return f"{self.vendor}.{self.tags.get(tag, f'Tag0x{tag:04X}')}"

	def parse(self, blob: bytes) -> List[MetadataField]:
		ifh, data = self.locate(blob)
		ifd = ImageFileDirectory_v2(ifh)
		fp = io.BytesIO(data)
		fp.seek(ifd.next)
		ifd.load(fp)
		fields: List[MetadataField] = []
		for tag in sorted(ifd.keys()):
			fields.append(MetadataField(self.field_name(tag), strip_quotes(render_value(ifd[tag]))))
		return fields


class NikonParser(MakerNoteParser):
	# type 3: "Nikon\0" + 2 version bytes + 2 pad bytes + embedded TIFF
	vendor = "Nikon"
	header = b"Nikon\x00"
	tags = NIKON_TAGS

	def locate(self, blob: bytes) -> Tuple[bytes, bytes]:
		tiff = blob[10:]
		return tiff[:8], tiff


class FujifilmParser(MakerNoteParser):
	vendor = "Fujifilm"
	header = b"FUJIFILM"
	tags = FUJIFILM_TAGS

	def locate(self, blob: bytes) -> Tuple[bytes, bytes]:
		# little endian, offsets relative to the start of the blob
		return b"II\x2a\x00" + blob[8:12], blob


class AppleParser(MakerNoteParser):
	vendor = "Apple"
	header = b"Apple iOS\x00"
	tags = APPLE_TAGS

	def locate(self, blob: bytes) -> Tuple[bytes, bytes]:
		return b"MM\x00\x2a" + struct.pack(">L", 14), blob


ALL_PARSERS = (NikonParser(), FujifilmParser(), AppleParser())


class MakerNoteRegistry:
	def __init__(self) -> None:
		self._parsers: List[MakerNoteParser] = []

	def register_parsers(self, *parsers: MakerNoteParser) -> None:
		for p in parsers:
			if p not in self._parsers:
				self._parsers.append(p)

	@property
	def parsers(self) -> Tuple[MakerNoteParser, ...]:
		return tuple(self._parsers)

	def decode(self, blob: bytes) -> List[MetadataField]:
		for parser in self._parsers:
			if not parser.accepts(blob):
				continue
			try:
				return parser.parse(blob)
			except (SyntaxError, ValueError, OSError, EOFError, struct.error) as e:
				log_event(log, "makernote_corrupt", logging.WARNING, vendor=parser.vendor, error=str(e))
				return []
		log.debug("no maker-note parser for blob header %r", blob[:12])
		return []


DEFAULT_REGISTRY = MakerNoteRegistry()
DEFAULT_REGISTRY.register_parsers(*ALL_PARSERS)
