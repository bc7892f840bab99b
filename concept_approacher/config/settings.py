from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="APPROACHER_",
    )

    # ------------------------------------------------------------------
    # Core paths
    # ------------------------------------------------------------------
    DATA_DIR: Path = Field(
        default=Path("data"),
        description="Base data directory for corpus, parameter and snapshot files.",
    )

    CORPUS_FILE: Optional[Path] = Field(
        default=None,
        description=(
            "Concept corpus in the 'ID.[key:value,...]' line format. "
            "If None, DATA_DIR/corpus.txt is used."
        ),
    )

    PARAMS_FILE: Optional[Path] = Field(
        default=None,
        description=(
            "Parameter table file ('name=value' per line). "
            "If None, DATA_DIR/parameters.txt is used."
        ),
    )

    STORE_SNAPSHOT: Optional[Path] = Field(
        default=None,
        description=(
            "Optional pickled concept store. When set and present it is "
            "loaded instead of parsing the corpus file."
        ),
    )

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------
    USE_FUZZY_MATCHING: bool = Field(
        default=False,
        description="Use fuzzy (and recursive) matching for similarity reports.",
    )

    FUZZY_THRESHOLD: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Minimum string similarity for a fuzzy feature match.",
    )

    RECURSIVE_DEPTH: int = Field(
        default=2,
        ge=1,
        description=(
            "Maximum recursion depth for fuzzy matching. "
            "1 disables value substitution."
        ),
    )

    # ------------------------------------------------------------------
    # Parameter learning
    # ------------------------------------------------------------------
    OPTIMIZER_ITERATIONS: int = Field(
        default=100,
        ge=0,
        description="Default number of coordinate-ascent rounds.",
    )

    LEARNING_RATE: float = Field(
        default=0.01,
        description="Step size applied to the numerical gradient.",
    )

    GRADIENT_EPSILON: float = Field(
        default=0.001,
        gt=0.0,
        description="Perturbation used for the central-difference gradient.",
    )

    PARAM_MIN: float = Field(default=0.1, description="Lower clamp for learned weights.")
    PARAM_MAX: float = Field(default=5.0, description="Upper clamp for learned weights.")

    PROGRESS_EVERY: int = Field(
        default=10,
        ge=1,
        description="Log optimizer progress every N rounds.",
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Log level used by the command-line tools.",
    )

    # ------------------------------------------------------------------
    # Convenience derived paths
    # ------------------------------------------------------------------
    @property
    def corpus_path(self) -> Path:
        return self.CORPUS_FILE or self.DATA_DIR / "corpus.txt"

    @property
    def params_path(self) -> Path:
        return self.PARAMS_FILE or self.DATA_DIR / "parameters.txt"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Singleton-style accessor so we only construct Settings once and
    ensure the data directory exists on first access.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.DATA_DIR.mkdir(parents=True, exist_ok=True)

    return _settings


def reset_settings() -> None:
    """Drop the cached Settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
