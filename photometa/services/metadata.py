from __future__ import annotations

import logging
from typing import Dict, Optional

from photometa.services.errors import MetadataError, NoXmpPresent, NotAnImage, StoreError
from photometa.services.exif_decoder import decode_exif
from photometa.services.logs import log_event
from photometa.services.makernotes import DEFAULT_REGISTRY, MakerNoteRegistry
from photometa.services.object_store import ObjectStore
from photometa.services.records import ETAG, KEY, AttributeRecord, attribute_value
from photometa.services.xmp_decoder import decode_xmp

log = logging.getLogger("photometa.metadata")


def is_image(content_type: Optional[str]) -> bool:
	return bool(content_type) and content_type.startswith("image/")


def extract_attributes(
	body: bytes,
	content_type: Optional[str],
	etag: str,
	key: str,
	makernotes: MakerNoteRegistry = DEFAULT_REGISTRY,
) -> AttributeRecord:
	if not is_image(content_type):
		raise NotAnImage(content_type)

	record: AttributeRecord = {}
	for field in decode_exif(body, makernotes):
		record[field.name] = attribute_value(field.raw_value, "EXIF")

	# XMP is applied second so it wins on name collisions
	try:
		xmp_fields = decode_xmp(body)
	except NoXmpPresent:
		log_event(log, "xmp_absent", key=key)
		xmp_fields = []
	for field in xmp_fields:
		record[field.name] = attribute_value(field.raw_value, "XMP")

	record[ETAG] = etag.strip('"')
	record[KEY] = key.strip('"')
	return record


def describe_prefix(object_store: ObjectStore, bucket: str, prefix: str = "") -> Dict[str, AttributeRecord]:
	out: Dict[str, AttributeRecord] = {}
	for key in object_store.list(bucket, prefix):
		try:
			obj = object_store.get(bucket, key)
			out[key] = extract_attributes(obj.body, obj.content_type, obj.etag, key)
		except NotAnImage as e:
			log_event(log, "object_skipped", bucket=bucket, key=key, reason=str(e))
		except (MetadataError, StoreError) as e:
			log_event(log, "object_failed", logging.WARNING, bucket=bucket, key=key, error=str(e))
		except Exception as e:
			log_event(log, "object_error", logging.ERROR, bucket=bucket, key=key, error=repr(e))
	return out
