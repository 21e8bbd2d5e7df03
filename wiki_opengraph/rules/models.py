from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class DescriptionRules(BaseModel):
    max_length: int = 200
    abbrev_marker: str = "..."

    @model_validator(mode="after")
    def _check_width(self) -> "DescriptionRules":
        # The marker alone must leave room for at least one character.
        if self.max_length < len(self.abbrev_marker) + 1:
            raise ValueError(
                f"description.max_length must be at least {len(self.abbrev_marker) + 1}"
            )
        return self

class OpenGraphRules(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_type: str = "article"
    context_key: str = "og.metas"
    description: DescriptionRules = Field(default_factory=DescriptionRules)

class RbacRules(BaseModel):
    roles: dict[str, list[str]] = Field(default_factory=dict)
    public_permissions: list[str] = Field(default_factory=list)

class AbacRule(BaseModel):
    if_condition: dict[str, Any] = Field(alias="if")
    allow: list[str]

    model_config = ConfigDict(populate_by_name=True)

class AbacRules(BaseModel):
    page_view_rules: list[AbacRule] = Field(default_factory=list)

class Rules(BaseModel):
    project: ProjectRules
    opengraph: OpenGraphRules = Field(default_factory=OpenGraphRules)
    rbac: RbacRules = Field(default_factory=RbacRules)
    abac: AbacRules = Field(default_factory=AbacRules)
