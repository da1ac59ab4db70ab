from datetime import datetime

from pydantic import BaseModel, ConfigDict


class HandoverReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    case_no: str
    severity: str
    sending_engineer: str
    vertical: str
    sap: str
    valid: bool
    reject_reason: str = ""
    ta_reviewer: str
    comments: str = ""
    timestamp: datetime
