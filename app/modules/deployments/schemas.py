from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, List, Literal
from datetime import datetime


class DeploymentStatus(str, Enum):
    BUILDING = "building"
    DEPLOYED = "deployed"
    FAILED = "failed"


class DeploymentLog(BaseModel):
    timestamp: datetime
    message: str
    level: Literal["info", "error"] = "info"


class GeneratedFiles(BaseModel):
    entities: Dict[str, str] = Field(default_factory=dict)
    pages: Dict[str, str] = Field(default_factory=dict)
    components: Dict[str, str] = Field(default_factory=dict)
    layout: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.entities or self.pages or self.components or self.layout)


class DeploymentMetrics(BaseModel):
    total_classes: int = 0
    total_entities: int = 0
    total_pages: int = 0
    total_components: int = 0
    total_lines: int = 0
    estimated_complexity: Literal["Bassa", "Media", "Alta"] = "Bassa"
    deployment_time_seconds: int = 0


class DeploymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    board_id: str
    deployment_status: DeploymentStatus
    deployment_logs: List[DeploymentLog] = Field(default_factory=list)
    deployed_code: Optional[str] = None
    technical_specification: Optional[Dict[str, Any]] = None
    generated_files: Optional[GeneratedFiles] = None
    metrics: Optional[DeploymentMetrics] = None
    last_deployed_at: Optional[datetime] = None
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DeploymentLogsResponse(BaseModel):
    deployment_id: str
    board_id: str
    logs: List[DeploymentLog]
    status: DeploymentStatus
    has_more: bool = False


class GenerateResponse(BaseModel):
    success: bool = True
    deployment: DeploymentResponse
    metrics: DeploymentMetrics
    warnings: List[str] = Field(default_factory=list)
