from __future__ import annotations

import hashlib
import json
import mimetypes
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple

from photometa.services.errors import ObjectStoreError

META_DIR = ".meta"


@dataclass
class StoredObject:
	key: str
	body: bytes
	content_type: Optional[str]
	etag: str
	content_disposition: Optional[str] = None


def quoted_etag(body: bytes) -> str:
	return '"{}"'.format(hashlib.md5(body).hexdigest())


class ObjectStore(Protocol):
	def get(self, bucket: str, key: str) -> StoredObject:
		...

	def put(
		self,
		bucket: str,
		key: str,
		body: bytes,
		content_type: str,
		content_length: Optional[int] = None,
		disposition: Optional[str] = None,
	) -> str:
		...

	def list(self, bucket: str, prefix: str = "") -> List[str]:
		...


def _check_length(body: bytes, content_length: Optional[int]) -> None:
	if content_length is not None and content_length != len(body):
		raise ObjectStoreError(
			"content length mismatch",
			{"content_length": content_length, "actual": len(body)},
		)


class MemoryObjectStore:
	def __init__(self) -> None:
		self._objects: Dict[Tuple[str, str], StoredObject] = {}
		self._lock = threading.Lock()

	def get(self, bucket: str, key: str) -> StoredObject:
		with self._lock:
			obj = self._objects.get((bucket, key))
		if obj is None:
			raise ObjectStoreError("no such key", {"bucket": bucket, "key": key})
		return obj

	def put(self, bucket, key, body, content_type, content_length=None, disposition=None) -> str:
		_check_length(body, content_length)
		etag = quoted_etag(body)
		with self._lock:
			self._objects[(bucket, key)] = StoredObject(key, bytes(body), content_type, etag, disposition)
		return etag

	def list(self, bucket: str, prefix: str = "") -> List[str]:
		with self._lock:
			return sorted(k for (b, k) in self._objects if b == bucket and k.startswith(prefix))


class LocalObjectStore:
	"""Buckets are directories under root; metadata lives in JSON sidecars."""

	def __init__(self, root: Path) -> None:
		self.root = Path(root)

	def _path(self, bucket: str, key: str) -> Path:
		bucket_dir = (self.root / bucket).resolve()
		p = (bucket_dir / key).resolve()
		if bucket_dir not in p.parents:
			raise ObjectStoreError("key escapes bucket", {"bucket": bucket, "key": key})
		return p

	def _meta_path(self, bucket: str, key: str) -> Path:
		return self.root / META_DIR / bucket / f"{key}.json"

	def get(self, bucket: str, key: str) -> StoredObject:
		p = self._path(bucket, key)
		try:
			body = p.read_bytes()
		except OSError as e:
			raise ObjectStoreError(f"cannot read object: {e}", {"bucket": bucket, "key": key}) from e
		meta: Dict[str, Optional[str]] = {}
		meta_path = self._meta_path(bucket, key)
		if meta_path.exists():
			with meta_path.open("r", encoding="utf-8") as f:
				meta = json.load(f)
		content_type = meta.get("content_type") or mimetypes.guess_type(key)[0]
		return StoredObject(key, body, content_type, quoted_etag(body), meta.get("content_disposition"))

	def put(self, bucket, key, body, content_type, content_length=None, disposition=None) -> str:
		_check_length(body, content_length)
		p = self._path(bucket, key)
		meta_path = self._meta_path(bucket, key)
		try:
			p.parent.mkdir(parents=True, exist_ok=True)
			meta_path.parent.mkdir(parents=True, exist_ok=True)
			with p.open("wb") as f:
				f.write(body)
			with meta_path.open("w", encoding="utf-8") as f:
				json.dump({"content_type": content_type, "content_disposition": disposition}, f, indent=2)
		except OSError as e:
			raise ObjectStoreError(f"cannot write object: {e}", {"bucket": bucket, "key": key}) from e
		return quoted_etag(body)

	def list(self, bucket: str, prefix: str = "") -> List[str]:
		bucket_dir = self.root / bucket
		if not bucket_dir.is_dir():
			return []
		keys = (p.relative_to(bucket_dir).as_posix() for p in bucket_dir.rglob("*") if p.is_file())
		return sorted(k for k in keys if k.startswith(prefix))
