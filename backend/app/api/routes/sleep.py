"""Sleep Routes: ingestion and retrieval of nightly sleep records.

Invariants:
    - Record id is "{uid}_{date}": re-posting a night overwrites it
    - A caller only ever sees their own records; foreign ids read as 404
"""

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import AuthenticatedUser, get_current_user, validated_body
from app.core.clock import isoformat_z, utc_now
from app.core.errors import ResourceNotFoundError
from app.core.store_protocol import DocumentStore
from app.schemas.sleep import SleepRecordCreate

SLEEP_RECORDS = "sleepRecords"


def build_router(store: DocumentStore) -> APIRouter:
    router = APIRouter(prefix="/api/sleep", tags=["sleep"])

    async def load_own_record(record_id: str, uid: str) -> dict:
        record = await store.get_document(SLEEP_RECORDS, record_id)
        if record is None or record.get("userId") != uid:
            raise ResourceNotFoundError("Sleep record", record_id)
        return record

    @router.get("")
    async def list_sleep_records(
        limit: int = Query(30, ge=1, le=365),
        user: AuthenticatedUser = Depends(get_current_user),
    ):
        records = await store.query_documents(
            SLEEP_RECORDS,
            filters=[("userId", "==", user.uid)],
            order_by="date",
            descending=True,
            limit=limit,
        )
        return {"records": records, "count": len(records)}

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def submit_sleep_record(
        user: AuthenticatedUser = Depends(get_current_user),
        record: SleepRecordCreate = Depends(validated_body(SleepRecordCreate)),
    ):
        data = record.to_document()
        data["userId"] = user.uid
        data["recordedAt"] = isoformat_z(utc_now())
        record_id = f"{user.uid}_{data['date']}"
        return await store.set_document(SLEEP_RECORDS, record_id, data)

    @router.get("/{record_id}")
    async def get_sleep_record(
        record_id: str, user: AuthenticatedUser = Depends(get_current_user),
    ):
        return await load_own_record(record_id, user.uid)

    @router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_sleep_record(
        record_id: str, user: AuthenticatedUser = Depends(get_current_user),
    ):
        await load_own_record(record_id, user.uid)
        await store.delete_document(SLEEP_RECORDS, record_id)

    return router
