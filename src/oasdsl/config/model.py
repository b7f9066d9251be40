from pydantic import BaseModel, ConfigDict, Field, model_validator


class RenderSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    json_indent: int | None = 2
    ensure_ascii: bool = False
    yaml_width: int = 80
    yaml_indent: int = 2
    yaml_sequence_indent: int = 4
    yaml_sequence_offset: int = 2

    @model_validator(mode="after")
    def _validate_layout(self) -> "RenderSettings":
        if self.json_indent is not None and self.json_indent < 0:
            raise ValueError("json_indent must be a non-negative integer or null.")
        if self.yaml_width < 20:
            raise ValueError("yaml_width must be at least 20.")
        if self.yaml_indent < 1 or self.yaml_sequence_indent < 1:
            raise ValueError("YAML indents must be positive.")
        if self.yaml_sequence_offset >= self.yaml_sequence_indent:
            raise ValueError("yaml_sequence_offset must be smaller than yaml_sequence_indent.")
        return self


class CheckSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schemas: bool = True
    cross_format: bool = True


class Config(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: str = "v1"
    render: RenderSettings = Field(default_factory=RenderSettings)
    check: CheckSettings = Field(default_factory=CheckSettings)

    @model_validator(mode="after")
    def _validate_config(self) -> "Config":
        if self.version != "v1":
            raise ValueError("Only version v1 is supported.")
        return self
