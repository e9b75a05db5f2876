from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Optional, List


class NodeData(BaseModel):
    model_config = ConfigDict(extra="allow")

    level: Optional[int] = None
    title: Optional[str] = None
    objective: Optional[str] = None


class BoardNode(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    data: NodeData = Field(default_factory=NodeData)

    @field_validator("data", mode="before")
    @classmethod
    def empty_data(cls, value: Any) -> Any:
        # Nodes saved before their card was filled in carry no data object
        return value if isinstance(value, (dict, NodeData)) else {}

    @property
    def level(self) -> int:
        return self.data.level or 0


class BoardResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    nodes: List[BoardNode] = Field(default_factory=list)


class DevelopmentClass(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None


class Persona(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None


class UseCaseStep(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None


class UseCase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    steps: List[UseCaseStep] = Field(default_factory=list)

    @field_validator("steps", mode="before")
    @classmethod
    def step_objects(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [step if isinstance(step, (dict, UseCaseStep)) else {"action": None if step is None else str(step)} for step in value]


class RelatedCollections(BaseModel):
    development_classes: List[DevelopmentClass] = Field(default_factory=list)
    personas: List[Persona] = Field(default_factory=list)
    use_cases: List[UseCase] = Field(default_factory=list)
