"""Pydantic models for the pubz.yaml configuration file."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_REGISTRIES = {
    "npm": "https://registry.npmjs.org",
    "github": "https://npm.pkg.github.com",
}


class BuildConfig(BaseModel):
    """Workspace build step.

    Attributes:
        command: Executable run once at the workspace root.
        args: Arguments passed to the executable.
        default_artifacts: Files checked when a manifest declares no entry points.
    """

    model_config = ConfigDict(extra="forbid")

    command: str = "bun"
    args: list[str] = Field(default_factory=lambda: ["run", "build"])
    default_artifacts: list[str] = Field(default_factory=lambda: ["./dist/index.js"])


class PublishConfig(BaseModel):
    """Registry publishing step."""

    model_config = ConfigDict(extra="forbid")

    command: str = "bun"
    args: list[str] = Field(default_factory=lambda: ["publish"])
    access: str | None = "public"
    registries: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_REGISTRIES))
    default_registry: str = "npm"

    @field_validator("registries")
    @classmethod
    def _require_registries(cls, value: dict[str, str]) -> dict[str, str]:
        if not value:
            raise ValueError("at least one registry is required")
        return value

    @model_validator(mode="after")
    def _check_default_registry(self) -> PublishConfig:
        if self.default_registry not in self.registries:
            raise ValueError(
                f"default_registry {self.default_registry!r} is not one of "
                f"{', '.join(self.registries)}"
            )
        return self

    @property
    def default_registry_url(self) -> str:
        return self.registries[self.default_registry]


class GitConfig(BaseModel):
    """Version control behavior."""

    model_config = ConfigDict(extra="forbid")

    remote: str = "origin"
    tag_format: str = "v{version}"
    annotated_tags: bool = False
    bump_commit_message: str = "chore: release v{version}"
    release_commit_message: str = "chore: release {tag}"

    @field_validator("tag_format")
    @classmethod
    def _tag_has_version(cls, value: str) -> str:
        if "{version}" not in value:
            raise ValueError("tag_format must contain {version}")
        return value

    def tag_for(self, version: str) -> str:
        return self.tag_format.format(version=version)


class OrderingConfig(BaseModel):
    """Publish ordering behavior."""

    model_config = ConfigDict(extra="forbid")

    # False keeps best-effort ordering when local dependencies form a cycle.
    strict_cycles: bool = False


class PubzConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    build: BuildConfig = Field(default_factory=BuildConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    ordering: OrderingConfig = Field(default_factory=OrderingConfig)
