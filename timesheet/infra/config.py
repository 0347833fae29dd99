"""
Configuration management using Pydantic Settings.

Architecture Decision: Why pydantic-settings?
- Type-safe configuration with validation
- Supports multiple sources (YAML, env vars, defaults)
- Easy to test with different configurations
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExportPreferences(BaseModel):
    """
    Export defaults, usually loaded from settings.yaml.
    """
    timezone: str = Field(default="UTC", description="IANA zone used to display stored times")
    export_directory: Optional[str] = Field(default=None, description="Where exported files are written")
    pdf_page_size: str = Field(default="a4", pattern=r"^(a4|letter)$", description="'a4' or 'letter'")
    pdf_compression: bool = Field(default=True, description="Compress PDF page streams")


class Settings(BaseSettings):
    """
    Application settings with multiple sources:
    1. Default values (hardcoded)
    2. Environment variables / .env
    3. YAML config file (export preferences)
    """
    model_config = SettingsConfigDict(
        env_prefix='TIMESHEET_',
        env_file='.env',
        env_file_encoding='utf-8',
        env_nested_delimiter='__',
    )

    app_name: str = "Timesheet"
    config_dir: Optional[Path] = None
    data_dir: Optional[Path] = None

    database_url: Optional[str] = None
    log_level: str = "INFO"

    preferences: ExportPreferences = ExportPreferences()

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._init_paths()
        self._load_yaml_config()

    def _init_paths(self):
        """Initialize default paths based on OS"""
        if self.config_dir is None:
            if os.name == 'nt':  # Windows
                base = Path(os.getenv('APPDATA'))
            else:  # Linux/Mac
                base = Path.home() / '.config'
            self.config_dir = base / self.app_name.lower()

        if self.data_dir is None:
            if os.name == 'nt':
                base = Path(os.getenv('APPDATA'))
            else:
                base = Path.home() / '.local' / 'share'
            self.data_dir = base / self.app_name.lower()

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _load_yaml_config(self):
        """Load export preferences from YAML"""
        # Workspace config folder first, then the user's config directory
        config_file = Path("config/settings.yaml")
        if not config_file.exists():
            config_file = self.config_dir / "settings.yaml"

        if config_file.exists():
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
                if config_data:
                    self.preferences = ExportPreferences(**config_data)

    def save_preferences(self):
        """Save current preferences to YAML file"""
        config_file = self.config_dir / "settings.yaml"
        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(self.preferences.model_dump(), f, default_flow_style=False)

    def get_db_url(self) -> str:
        """Get database URL, creating default if not set"""
        if self.database_url:
            return self.database_url

        db_path = self.data_dir / 'timesheet.db'
        return f"sqlite+aiosqlite:///{db_path}"

    def get_export_dir(self) -> Path:
        """Directory exported files are written to"""
        if self.preferences.export_directory:
            export_dir = Path(self.preferences.export_directory)
        else:
            export_dir = self.data_dir / 'exports'
        export_dir.mkdir(parents=True, exist_ok=True)
        return export_dir


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
