from __future__ import annotations

from photometa.services.attribute_store import AttributeStore, JsonAttributeStore
from photometa.services.object_store import LocalObjectStore, ObjectStore
from photometa.services.settings import Settings, get_settings


def settings_dep() -> Settings:
	return get_settings()


def object_store_dep() -> ObjectStore:
	return LocalObjectStore(get_settings().objects_dir)


def attribute_store_dep() -> AttributeStore:
	s = get_settings()
	return JsonAttributeStore(s.tables_dir, page_size=s.scan_page_size, max_page_bytes=s.scan_max_bytes)
