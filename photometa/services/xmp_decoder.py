from __future__ import annotations

import io
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from photometa.services.errors import DecodeFailure, NoXmpPresent
from photometa.services.records import MetadataField

XMP_PACKET_MARKER = b"<?xpacket"

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XML_NS = "http://www.w3.org/XML/1998/namespace"

RDF_RDF = f"{{{RDF_NS}}}RDF"
RDF_DESCRIPTION = f"{{{RDF_NS}}}Description"
RDF_LI = f"{{{RDF_NS}}}li"
RDF_ALT = f"{{{RDF_NS}}}Alt"
RDF_CONTAINERS = {f"{{{RDF_NS}}}Seq", f"{{{RDF_NS}}}Bag", RDF_ALT}
RDF_RESOURCE = f"{{{RDF_NS}}}resource"
RDF_PARSE_TYPE = f"{{{RDF_NS}}}parseType"
XML_LANG = f"{{{XML_NS}}}lang"


def find_packet(body: bytes) -> bytes:
	count = body.count(XMP_PACKET_MARKER)
	if count == 0:
		raise NoXmpPresent()
	if count != 2:
		raise DecodeFailure("XMP", f"expected 2 packet markers, found {count}")
	start = body.index(XMP_PACKET_MARKER)
	closing = body.index(XMP_PACKET_MARKER, start + len(XMP_PACKET_MARKER))
	end = body.find(b"?>", closing)
	if end == -1:
		raise DecodeFailure("XMP", "unterminated closing packet marker")
	return body[start:end + 2]


def parse_packet(packet: bytes):
	prefixes: Dict[str, str] = {}
	try:
		events = ET.iterparse(io.BytesIO(packet), events=("start-ns",))
		for _, (prefix, uri) in events:
			prefixes.setdefault(uri, prefix)
		root = events.root
	except ET.ParseError as e:
		raise DecodeFailure("XMP", str(e)) from e
	return root, prefixes


class _PathWalker:
	def __init__(self, prefixes: Dict[str, str]) -> None:
		self.prefixes = prefixes
		self.fields: List[MetadataField] = []

	def qname(self, tag: str) -> str:
		if not tag.startswith("{"):
			return tag
		uri, local = tag[1:].split("}", 1)
		prefix = self.prefixes.get(uri)
		return f"{prefix}:{local}" if prefix else local

	@staticmethod
	def join(parent: Optional[str], name: str) -> str:
		return f"{parent}.{name}" if parent else name

	@staticmethod
	def _is_property_attr(attr: str) -> bool:
		return not (attr.startswith(f"{{{RDF_NS}}}") or attr.startswith(f"{{{XML_NS}}}"))

	def description(self, elem: ET.Element, path: Optional[str]) -> None:
		for attr, value in elem.attrib.items():
			if self._is_property_attr(attr):
				self.fields.append(MetadataField(self.join(path, self.qname(attr)), value))
		for child in elem:
			self.prop(child, self.join(path, self.qname(child.tag)))

	def prop(self, elem: ET.Element, path: str) -> None:
		resource = elem.get(RDF_RESOURCE)
		if resource is not None:
			self.fields.append(MetadataField(path, resource))
			return
		if elem.get(RDF_PARSE_TYPE) == "Resource":
			self.description(elem, path)
			return
		children = list(elem)
		if not children:
			if any(self._is_property_attr(a) for a in elem.attrib):
				self.description(elem, path)
			else:
				self.fields.append(MetadataField(path, elem.text or ""))
			return
		for child in children:
			if child.tag in RDF_CONTAINERS:
				self.container(child, path)
			elif child.tag == RDF_DESCRIPTION:
				self.description(child, path)
			else:
				self.prop(child, self.join(path, self.qname(child.tag)))

	def container(self, elem: ET.Element, path: str) -> None:
		for i, li in enumerate(elem.findall(RDF_LI)):
			label = li.get(XML_LANG) if elem.tag == RDF_ALT else None
			self.prop(li, f"{path}[{label if label else i}]")


def decode_xmp(body: bytes) -> List[MetadataField]:
	root, prefixes = parse_packet(find_packet(body))
	rdf_nodes = list(root.iter(RDF_RDF))
	if not rdf_nodes:
		raise DecodeFailure("XMP", "no rdf:RDF element in packet")
	walker = _PathWalker(prefixes)
	for rdf in rdf_nodes:
		for desc in rdf.findall(RDF_DESCRIPTION):
			walker.description(desc, None)
	return walker.fields
