from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class UploadsRules(BaseModel):
    max_files_per_request: int = Field(default=5, ge=1)
    max_transport_parts: int = Field(default=10, ge=1)
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    allowlist_mime_types: list[str]
    allowlist_extensions: list[str]

    @field_validator("allowlist_extensions")
    @classmethod
    def _normalise_extensions(cls, value: list[str]) -> list[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]


class ProjectsRules(BaseModel):
    max_assets_per_project: int = Field(default=5, ge=1)


class TokensRules(BaseModel):
    token_bytes: int = Field(default=32, ge=16)


class StoreRules(BaseModel):
    timeout_seconds: float = Field(default=5.0, gt=0)


class OpsRules(BaseModel):
    data_dir_required: bool = True
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    uploads: UploadsRules
    projects: ProjectsRules = Field(default_factory=ProjectsRules)
    tokens: TokensRules = Field(default_factory=TokensRules)
    store: StoreRules = Field(default_factory=StoreRules)
    ops: OpsRules = Field(default_factory=OpsRules)
