from pydantic import BaseModel, ConfigDict, Field


class Case(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    case_number: str = Field(alias="caseNumber")
    severity: str  # A, B, C
    is_247: bool = Field(alias="is247")
    title: str
    description: str
    vertical: str
    sap: str  # support area path
    sending_engineer: str = Field(alias="sendingEngineer")
    ta_reviewer: str = Field(alias="taReviewer")
