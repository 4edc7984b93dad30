from typing import Dict, List, Optional

from fastapi import APIRouter, Request

from teamcomm.models.enums import DISPLAY_ENUMS

router = APIRouter()


@router.get("/enums")
def get_enums() -> Dict[str, List[Dict[str, Optional[str]]]]:
    """Values of every enumeration with their labels and colors, for clients."""
    return {
        key: [
            {"value": member.value, "display_name": member.display_name, "color_code": member.color_code}
            for member in enum_cls
        ]
        for key, enum_cls in DISPLAY_ENUMS.items()
    }


@router.get("/client-config")
def get_client_config(request: Request) -> Dict[str, int]:
    """Settings clients need, such as how often to poll for new records."""
    application = request.app.state.settings.application
    return {
        "refresh_interval": application.refresh_interval,
        "session_duration_hours": application.session_duration_hours,
    }
