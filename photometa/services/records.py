from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional

from photometa.services.errors import DecodeFailure


ETAG = "etag"
KEY = "key"

# None is the "present but empty" value; a missing key was never observed.
AttributeValue = Optional[str]
AttributeRecord = Dict[str, AttributeValue]


class MetadataField(NamedTuple):
	name: str
	raw_value: str


@dataclass
class ScanPage:
	items: List[AttributeRecord] = field(default_factory=list)
	cursor: Optional[str] = None


def strip_quotes(value: str) -> str:
	if len(value) > 0 and value.startswith('"') and value.endswith('"'):
		return value.lstrip('"').rstrip('"')
	return value


def attribute_value(raw: Any, fmt: str = "metadata") -> AttributeValue:
	if not isinstance(raw, str):
		raise DecodeFailure(fmt, f"value is not text: {type(raw).__name__}")
	return raw if raw else None
