from __future__ import annotations

from fastapi import APIRouter

from sms_relay.api.deps import SinkDep, StoreDep
from sms_relay.api.v1.schemas.sms import SmsReceivedResponse, SmsRequest
from sms_relay.services import ingestion_service

router = APIRouter(prefix="/api/sms", tags=["sms"])


@router.post("", response_model=SmsReceivedResponse)
async def receive_sms(
    body: SmsRequest,
    store: StoreDep,
    sink: SinkDep,
) -> SmsReceivedResponse:
    ack = await ingestion_service.receive_sms(
        body.sender,
        body.text,
        body.timestamp,
        store,
        sink,
    )
    return SmsReceivedResponse.model_validate(ack, from_attributes=True)
