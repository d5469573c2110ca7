"""
Settings Configuration
Pydantic-validated configuration loaded from a TOML document
"""
import logging
import tomllib
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from core import ReportSpec
from utils.exceptions import ConfigurationError


DEFAULT_ACCOUNTS_URL = "https://accounts.veracross.com"
DEFAULT_AXIOM_URL = "https://axiom.veracross.com"

# flat keys used by earlier axiom-query configs, mapped into [veracross]
LEGACY_VERACROSS_KEYS = {
    "veracross_username": "username",
    "veracross_password": "password",
    "veracross_school": "school",
}


class VeracrossSettings(BaseSettings):
    """Veracross Axiom credentials"""
    username: Optional[str] = Field(default=None, description="Axiom username")
    password: Optional[str] = Field(default=None, description="Axiom password")
    school: Optional[str] = Field(default=None, description="School / tenant route, e.g. 'whitby'")
    accounts_url: str = Field(default=DEFAULT_ACCOUNTS_URL, description="Login portal base URL")
    axiom_url: str = Field(default=DEFAULT_AXIOM_URL, description="Axiom base URL")
    
    class Config:
        env_prefix = "VERACROSS_"
    
    @field_validator("accounts_url", "axiom_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return str(value).rstrip("/")
    
    def is_configured(self) -> bool:
        return bool(self.username and self.password and self.school)


class GeneralSettings(BaseSettings):
    """Per-round behaviour"""
    request_timeout: float = Field(default=300.0, gt=0, description="Per-task fetch timeout (seconds)")
    max_concurrency: Optional[int] = Field(default=None, ge=1, description="Cap on in-flight tasks (None = one task per report)")
    artifact_suffix: str = Field(default=".json", description="Suffix appended to artifact names")
    
    class Config:
        env_prefix = "AXIOM_QUERY_"


class LoggingSettings(BaseSettings):
    """Logging"""
    level: str = Field(default="INFO", description="Log level name")
    file: Optional[str] = Field(default=None, description="Optional log file path")
    
    class Config:
        env_prefix = "AXIOM_QUERY_LOG_"
    
    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: object) -> str:
        name = str(value or "").strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown log level: {value!r}")
        return name


class Settings(BaseSettings):
    """Top-level configuration"""
    
    interval: float = Field(..., gt=0, description="Polling interval (minutes)")
    reports_path: Path = Field(..., description="Directory that receives report artifacts")
    reports: List[ReportSpec] = Field(..., min_length=1, description="Reports fetched every round")
    
    veracross: VeracrossSettings = Field(default_factory=VeracrossSettings)
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    
    class Config:
        env_prefix = "AXIOM_QUERY_"
        extra = "forbid"
    
    @field_validator("reports")
    @classmethod
    def _reject_duplicate_names(cls, reports: List[ReportSpec]) -> List[ReportSpec]:
        seen = set()
        for report in reports:
            if report.name in seen:
                raise ValueError(f"duplicate report name: {report.name!r}")
            seen.add(report.name)
        return reports
    
    @property
    def interval_seconds(self) -> float:
        return self.interval * 60.0
    
    @classmethod
    def load_from_file(cls, config_path: Union[str, Path]) -> "Settings":
        """
        Load and validate a TOML configuration document.
        
        A ``.env`` beside the document is loaded first so credentials can
        live outside the TOML file. Values present in the TOML win.
        
        Raises:
            ConfigurationError: unreadable, malformed or invalid document
        """
        path = Path(config_path)
        
        env_path = path.parent / ".env"
        if env_path.exists():
            load_dotenv(env_path)
        
        try:
            with path.open("rb") as fh:
                data = tomllib.load(fh)
        except OSError as exc:
            raise ConfigurationError(f"cannot read configuration: {exc}", {"path": str(path)}) from exc
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"malformed configuration: {exc}", {"path": str(path)}) from exc
        
        try:
            veracross_data = dict(data.pop("veracross", None) or {})
            for legacy_key, key in LEGACY_VERACROSS_KEYS.items():
                if legacy_key in data:
                    veracross_data.setdefault(key, data.pop(legacy_key))
            
            # sub-settings are built explicitly so environment variables fill gaps
            settings = cls(
                veracross=VeracrossSettings(**veracross_data),
                general=GeneralSettings(**dict(data.pop("general", None) or {})),
                logging=LoggingSettings(**dict(data.pop("logging", None) or {})),
                **data,
            )
        except (ValidationError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"invalid configuration: {exc}", {"path": str(path)}) from exc
        
        if not settings.veracross.is_configured():
            raise ConfigurationError(
                "veracross username, password and school are required",
                {"path": str(path)},
            )
        
        return settings
