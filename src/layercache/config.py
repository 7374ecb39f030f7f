import yaml
import logging
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator, ConfigDict

from . import constants
from .io import FileSystem, DiskFileSystem
from .exceptions import (
    ConfigParsingError,
    ConfigFileMissingError,
    ConfigValidationError,
    CachePathNotFoundError,
)


logger = logging.getLogger(__name__)


class LocalModel(BaseModel):
    """
        Class Config-Validation Model describe `local`
    """
    directory: str = constants.DEFAULT_CACHE_DIR
    filesystem: str = "disk"
    model_config = ConfigDict(extra="forbid")

    @field_validator('filesystem')
    @classmethod
    def check_filesystem(cls, value: str) -> str:
        if value not in constants.LOCAL_FS_KINDS:
            raise ValueError(f"filesystem must be one of {sorted(constants.LOCAL_FS_KINDS)}, got '{value}'")
        return value


class DurableModel(BaseModel):
    """
        Class Config-Validation Model describe `durable`
    """
    url: Optional[str] = None
    storage_options: Dict[str, Any] = Field(default_factory=dict)
    workers: int = Field(constants.DEFAULT_DURABLE_WORKERS, ge=1)
    model_config = ConfigDict(extra="forbid")


class WriteBackModel(BaseModel):
    """
        Class Config-Validation Model describe `writeback`
    """
    workers: int = Field(constants.DEFAULT_WRITEBACK_WORKERS, ge=1)
    max_pending: int = Field(constants.DEFAULT_WRITEBACK_MAX_PENDING, ge=1)
    synchronous: bool = False
    model_config = ConfigDict(extra="forbid")


class LoggingModel(BaseModel):
    """
        Class Config-Validation Model describe `logging`
    """
    debug: bool = False
    levels: Dict[str, str] = Field(default_factory=dict)
    file: Optional[str] = None
    model_config = ConfigDict(extra="forbid")


class CacheConfigModel(BaseModel):
    """
        Class Config-Validation Model desribe top-level of config
    """
    local: LocalModel = Field(default_factory=LocalModel)
    durable: DurableModel = Field(default_factory=DurableModel)
    writeback: WriteBackModel = Field(default_factory=WriteBackModel)
    logging: LoggingModel = Field(default_factory=LoggingModel)
    model_config = ConfigDict(extra="forbid")


class Config:
    """
    Loads and validates the cache YAML file using Pydantic models.
    It is the sole gatekeeper for configuration.
    """
    def __init__(self, config_path: Optional[str] = None, fs: Optional[FileSystem] = None, data: Optional[Dict[str, Any]] = None):
        self.path = config_path
        self.fs = fs or DiskFileSystem()
        if data is None and config_path is None:
            data = {}
        elif data is None:
            logger.info(f"Loading configuration from '{self.path}'...")
            data = self._load_raw_config()

        try:
            self.model = CacheConfigModel.model_validate(data)
            logger.debug(f"Configuration model validated successfully: \n{self.model.model_dump_json(indent=2)}")
        except ValidationError as e:
            raise ConfigValidationError(f"Configuration validation failed:\n{e}") from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        return cls(data=data)

    def _load_raw_config(self) -> Dict[str, Any]:
        try:
            content = self.fs.read_bytes(str(self.path)).decode("utf-8")
            config_data = yaml.safe_load(content)
        except (FileNotFoundError, CachePathNotFoundError):
            raise ConfigFileMissingError(f"Configuration file not found at: {self.path}")
        except yaml.YAMLError as e:
            raise ConfigParsingError(f"Error parsing YAML file: {e}")

        # An empty file means "all defaults"
        if config_data is None:
            return {}
        if not isinstance(config_data, dict):
            raise ConfigParsingError("Configuration file must be a YAML document containing a dictionary.")
        logger.debug(f"Successfully parsed YAML from '{self.path}'.")
        return config_data

    @property
    def local(self) -> LocalModel:
        return self.model.local

    @property
    def durable(self) -> DurableModel:
        return self.model.durable

    @property
    def writeback(self) -> WriteBackModel:
        return self.model.writeback

    @property
    def logging(self) -> LoggingModel:
        return self.model.logging
