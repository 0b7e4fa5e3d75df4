"""Configuration models."""

from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("problembank", description="Database name")
    user: str = Field("problembank_user", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(
        "PROBLEMBANK_DB_PASSWORD", description="Environment variable for password"
    )
    pool_min_size: int = Field(1, description="Connections kept open", ge=1)
    pool_max_size: int = Field(10, description="Most connections the pool will open", ge=1)


class SimilarityConfig(BaseModel):
    """Similarity engine configuration."""

    threshold: float = Field(0.3, description="Minimum score to store an edge", ge=0.0, le=1.0)
    text_weight: float = Field(0.5, ge=0.0, le=1.0)
    theme_weight: float = Field(0.5, ge=0.0, le=1.0)
    theme_match_score: float = Field(0.5, description="Theme component when themes match", ge=0.0, le=1.0)
    min_word_length: int = Field(4, description="Shortest word kept for text overlap", ge=1)
    method: str = Field("keyword", description="Method tag stored on edges")
    algorithm_version: str = Field("v1-keyword", description="Algorithm version stored on edges")
    batch_size: int = Field(500, description="Edges per bulk upsert", ge=1, le=10000)

    @field_validator("theme_weight")
    @classmethod
    def validate_weights(cls, v: float, info) -> float:
        """Validate that weights sum to 1.0."""
        total = info.data.get("text_weight", 0.5) + v
        if abs(total - 1.0) > 0.001:
            raise ValueError(f"Weights must sum to 1.0, got {total}")
        return v


class ClusteringConfig(BaseModel):
    """Cluster builder configuration."""

    min_members: int = Field(2, description="Members needed before a theme gets a cluster", ge=1)
    auto_membership_score: float = Field(0.8, ge=0.0, le=1.0)
    manual_membership_score: float = Field(1.0, ge=0.0, le=1.0)
    top_members: int = Field(10, description="Members returned per cluster listing", ge=1, le=100)
    theme_names: Dict[str, str] = Field(
        default_factory=lambda: {
            "healthcare": "Healthcare + AI Problems",
            "education": "Education + AI Problems",
            "agriculture": "Agriculture + AI Problems",
            "environment": "Environment + AI Problems",
            "community": "Community + AI Problems",
            "platform": "Platform & Admin Apps",
            "other": "Other Problems",
        },
        description="Friendly cluster names per theme",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    rich_tracebacks: bool = Field(True, description="Render tracebacks with rich")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class ConfigModel(BaseModel):
    """Main configuration model."""

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    similarity: SimilarityConfig = Field(default_factory=SimilarityConfig)
    clustering: ClusteringConfig = Field(default_factory=ClusteringConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
