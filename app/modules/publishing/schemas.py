from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List


class PublishRequest(BaseModel):
    board_id: Optional[str] = None
    repo_name: Optional[str] = None
    github_token: Optional[str] = None


class RepositoryInfo(BaseModel):
    name: str
    full_name: str
    html_url: str
    clone_url: str


class NextSteps(BaseModel):
    deno_deploy_url: str
    entry_point: str
    required_env_vars: List[str]


class PublishResponse(BaseModel):
    success: bool = True
    repository: RepositoryInfo
    files_count: int
    next_steps: NextSteps


class FilesPreviewResponse(BaseModel):
    board_id: str
    files_count: int
    files: Dict[str, str]


class StackBlitzFile(BaseModel):
    content: str = ""


class StackBlitzRequest(BaseModel):
    files: Optional[Dict[str, StackBlitzFile]] = None
    project_name: Optional[str] = None


class StackBlitzResponse(BaseModel):
    success: bool = True
    project_id: str
    payload: Dict[str, Any]
    payload_compressed: str
    instructions: str = Field(default="Use the payload with StackBlitz SDK or create via form POST")
