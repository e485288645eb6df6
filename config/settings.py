"""
Central configuration for the sheet export engine.
All tunable parameters are exposed here with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.export import OverflowMode


class ExportConfig(BaseSettings):
    """Configuration for document building and serialization."""

    # Sheet
    sheet_name: str = "Export"
    date_format: str = Field(
        default="m/dd/yyyy",
        description="Number format applied to date cells"
    )

    # Overflow thresholds (characters). The map and field paths historically
    # used 100, the full-type dump used 50.
    map_overflow_threshold: int = Field(
        default=100,
        description="Text length above which a key-bound cell overflows"
    )
    field_overflow_threshold: int = Field(
        default=100,
        description="Text length above which a field-bound cell overflows"
    )
    dump_overflow_threshold: int = Field(
        default=50,
        description="Text length above which a cell overflows when dumping every field of a type"
    )
    overflow_mode: OverflowMode = OverflowMode.LAST_WINS

    # Column sizing
    oversized_column_width: int = Field(
        default=18000,
        description="Fixed width of an oversized column, in 1/256 character units"
    )
    autofit_min_width: int = 10
    autofit_max_width: int = 255
    autofit_padding: int = 2

    # Numeric narrowing
    integer_bits: int = 32

    model_config = SettingsConfigDict(env_prefix="SHEET_EXPORT_")


class AppConfig(BaseSettings):
    """Main application configuration."""

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Largest record collection accepted by a single export request
    max_export_records: int = 50000

    default_filename: str = "export.xlsx"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SHEET_APP_")


# Global configuration instances
export_config = ExportConfig()
app_config = AppConfig()
