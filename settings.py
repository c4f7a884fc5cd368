from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    project_dir: Path = Path("./data")
    sheet_title: str = "Your Social Media Strategy"
    output_filename: str = "social-strategy.pdf"
    logo_timeout_sec: float = 10.0
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SSG_",
        env_file_encoding="utf-8",
    )

    @field_validator("output_filename")
    @classmethod
    def filename_must_be_pdf(cls, v: str) -> str:
        if not v.lower().endswith(".pdf") or "/" in v or "\\" in v:
            raise ValueError("output_filename must be a bare file name ending in .pdf")
        return v

    @field_validator("logo_timeout_sec")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("logo_timeout_sec must be positive")
        return v

    @property
    def template_dir(self) -> Path:
        return self.project_dir / "template"

    @property
    def output_dir(self) -> Path:
        return self.project_dir / "output"

    @property
    def design_yaml_path(self) -> Path:
        return self.template_dir / "design.yaml"
