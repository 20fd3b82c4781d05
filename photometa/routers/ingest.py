from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile
from pydantic import BaseModel, Field

from photometa.routers.deps import attribute_store_dep, object_store_dep, settings_dep
from photometa.services.attribute_store import AttributeStore
from photometa.services.ingestion import ObjectEvent, process_batch
from photometa.services.metadata import describe_prefix
from photometa.services.object_store import ObjectStore
from photometa.services.settings import Settings


router = APIRouter(tags=["ingest"])


class S3Bucket(BaseModel):
	name: str


class S3Object(BaseModel):
	key: str


class S3Entity(BaseModel):
	bucket: S3Bucket
	object: S3Object


class EventRecord(BaseModel):
	s3: S3Entity


class ObjectCreatedEvent(BaseModel):
	records: List[EventRecord] = Field(default_factory=list, alias="Records")


def _upload_key(prefix: str, filename: Optional[str]) -> str:
	name = Path(filename or "image.jpg").name
	prefix = prefix.strip("/")
	return f"{prefix}/{name}" if prefix else name


@router.post("/events/objects", summary="Extract metadata for newly created objects")
def object_events(
	event: ObjectCreatedEvent,
	object_store: ObjectStore = Depends(object_store_dep),
	attribute_store: AttributeStore = Depends(attribute_store_dep),
	settings: Settings = Depends(settings_dep),
):
	events = [ObjectEvent(r.s3.bucket.name, r.s3.object.key) for r in event.records]
	report = process_batch(events, object_store, attribute_store, settings.table, settings.max_workers)
	return {
		"processed": report.processed,
		"skipped": report.skipped,
		"failed": report.failed,
	}


@router.post("/images/upload", summary="Store uploaded images and extract their metadata in the background")
async def upload(
	background_tasks: BackgroundTasks,
	files: List[UploadFile] = File(...),
	prefix: str = Form(""),
	object_store: ObjectStore = Depends(object_store_dep),
	attribute_store: AttributeStore = Depends(attribute_store_dep),
	settings: Settings = Depends(settings_dep),
):
	events = []
	for f in files:
		data = await f.read()
		key = _upload_key(prefix, f.filename)
		object_store.put(settings.upload_bucket, key, data, f.content_type or "application/octet-stream", len(data))
		events.append(ObjectEvent(settings.upload_bucket, key))
	background_tasks.add_task(process_batch, events, object_store, attribute_store, settings.table, settings.max_workers)
	return {
		"status": "queued",
		"bucket": settings.upload_bucket,
		"keys": [e.key for e in events],
		"num_files": len(events),
	}


@router.get("/images/metadata", summary="Extract metadata for every image under a prefix")
def metadata(
	prefix: str = "",
	bucket: Optional[str] = None,
	object_store: ObjectStore = Depends(object_store_dep),
	settings: Settings = Depends(settings_dep),
):
	return describe_prefix(object_store, bucket or settings.upload_bucket, prefix)
