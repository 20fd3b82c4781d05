from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from photometa.routers.deps import attribute_store_dep, object_store_dep, settings_dep
from photometa.services.attribute_store import AttributeStore
from photometa.services.export import export_csv
from photometa.services.object_store import ObjectStore
from photometa.services.settings import Settings


router = APIRouter(prefix="/export", tags=["export"])


@router.post("", summary="Export every stored record as one CSV table")
def export(
	bucket: Optional[str] = None,
	key: Optional[str] = None,
	object_store: ObjectStore = Depends(object_store_dep),
	attribute_store: AttributeStore = Depends(attribute_store_dep),
	settings: Settings = Depends(settings_dep),
):
	report = export_csv(
		attribute_store,
		object_store,
		settings.table,
		bucket or settings.export_bucket,
		key or settings.export_key,
	)
	return {
		"bucket": report.bucket,
		"key": report.key,
		"rows": report.rows,
		"columns": report.columns,
		"size": report.size,
		"etag": report.etag,
	}
