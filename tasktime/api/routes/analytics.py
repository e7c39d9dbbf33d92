from __future__ import annotations

from fastapi import APIRouter, Depends

from tasktime.api.deps import Services, get_current_user, get_services
from tasktime.api.schemas import envelope, report_to_dict
from tasktime.domain.entities import UserEntity

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/time")
def time_analytics(user: UserEntity = Depends(get_current_user), services: Services = Depends(get_services)):
    return envelope(**report_to_dict(services.analytics.compute_analytics(user.id)))
