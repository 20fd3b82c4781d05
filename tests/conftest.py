import io
import struct

import piexif
import pytest
from PIL import Image

from photometa.services.attribute_store import MemoryAttributeStore
from photometa.services.object_store import MemoryObjectStore
from photometa.services.settings import reset_settings


XMP_PACKET = (
	'<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>\n'
	'<x:xmpmeta xmlns:x="adobe:ns:meta/">\n'
	' <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">\n'
	'  <rdf:Description rdf:about=""\n'
	'    xmlns:xmp="http://ns.adobe.com/xap/1.0/"\n'
	'    xmlns:dc="http://purl.org/dc/elements/1.1/"\n'
	'    xmlns:drone-dji="http://www.dji.com/drone-dji/1.0/"\n'
	'    xmp:CreatorTool="v01.02.0300"\n'
	'    drone-dji:GpsLatitude="+37.1">\n'
	'   <dc:format>image/jpeg</dc:format>\n'
	'   <dc:subject><rdf:Bag><rdf:li>survey</rdf:li><rdf:li>site-4</rdf:li></rdf:Bag></dc:subject>\n'
	'   <dc:title><rdf:Alt><rdf:li xml:lang="x-default">Pit</rdf:li></rdf:Alt></dc:title>\n'
	'   <xmp:Label></xmp:Label>\n'
	'  </rdf:Description>\n'
	' </rdf:RDF>\n'
	'</x:xmpmeta>\n'
	'<?xpacket end="w"?>'
).encode("utf-8")


def xmp_packet(description_body: str, namespaces: str = "") -> bytes:
	return (
		'<?xpacket begin="" id="W5M0MpCehiHzreSzNTczkc9d"?>'
		'<x:xmpmeta xmlns:x="adobe:ns:meta/">'
		'<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">'
		f'<rdf:Description rdf:about="" {namespaces}>{description_body}</rdf:Description>'
		'</rdf:RDF></x:xmpmeta>'
		'<?xpacket end="w"?>'
	).encode("utf-8")


def make_jpeg(zeroth=None, exif=None, gps=None) -> bytes:
	img = Image.new("RGB", (8, 8), (120, 80, 40))
	buf = io.BytesIO()
	if zeroth or exif or gps:
		exif_bytes = piexif.dump({"0th": zeroth or {}, "Exif": exif or {}, "GPS": gps or {}})
		img.save(buf, format="JPEG", exif=exif_bytes)
	else:
		img.save(buf, format="JPEG")
	return buf.getvalue()


def make_png() -> bytes:
	buf = io.BytesIO()
	Image.new("RGB", (4, 4)).save(buf, format="PNG")
	return buf.getvalue()


def with_xmp(jpeg: bytes, packet: bytes) -> bytes:
	# XMP travels in its own APP1 segment right after SOI
	payload = b"http://ns.adobe.com/xap/1.0/\x00" + packet
	segment = b"\xff\xe1" + struct.pack(">H", len(payload) + 2) + payload
	return jpeg[:2] + segment + jpeg[2:]


def with_exif_segment(jpeg: bytes, tiff: bytes) -> bytes:
	payload = b"Exif\x00\x00" + tiff
	segment = b"\xff\xe1" + struct.pack(">H", len(payload) + 2) + payload
	return jpeg[:2] + segment + jpeg[2:]


def short_xresolution_jpeg() -> bytes:
	# XResolution is RATIONAL by definition; this file stores it as SHORT
	entry = struct.pack(">HHL", 0x011A, 3, 1) + struct.pack(">HH", 72, 0)
	tiff = b"MM\x00\x2a" + struct.pack(">L", 8) + struct.pack(">H", 1) + entry + struct.pack(">L", 0)
	return with_exif_segment(make_jpeg(), tiff)


def nikon_makernote() -> bytes:
	entries = struct.pack(">HHL", 0x0002, 3, 2) + struct.pack(">HH", 0, 200)
	entries += struct.pack(">HHLL", 0x0004, 2, 5, 38)
	tiff = b"MM\x00\x2a" + struct.pack(">L", 8) + struct.pack(">H", 2) + entries + struct.pack(">L", 0) + b"FINE\x00"
	return b"Nikon\x00\x02\x10\x00\x00" + tiff


def fujifilm_makernote() -> bytes:
	entry = struct.pack("<HHLL", 0x1000, 2, 8, 30)
	return b"FUJIFILM" + struct.pack("<L", 12) + struct.pack("<H", 1) + entry + struct.pack("<L", 0) + b"NORMAL \x00"


CANON_ZEROTH = {
	piexif.ImageIFD.Make: "Canon",
	piexif.ImageIFD.Model: "Canon EOS 5D",
	piexif.ImageIFD.XResolution: (72, 1),
}

CANON_EXIF = {
	piexif.ExifIFD.DateTimeOriginal: "2019:05:01 10:00:00",
	piexif.ExifIFD.FNumber: (28, 10),
	piexif.ExifIFD.ISOSpeedRatings: 200,
}


@pytest.fixture()
def object_store():
	return MemoryObjectStore()


@pytest.fixture()
def attribute_store():
	return MemoryAttributeStore(page_size=2)


@pytest.fixture()
def canon_jpeg():
	return make_jpeg(CANON_ZEROTH, CANON_EXIF)


@pytest.fixture()
def clean_settings(monkeypatch, tmp_path):
	monkeypatch.setenv("PHOTOMETA_DATA_DIR", str(tmp_path))
	reset_settings()
	yield tmp_path
	reset_settings()
