import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from content_harvester.rules import DEFAULT_CLEAN_PARAM_PATTERNS, DEFAULT_IGNORE_PATTERNS


class HarvestConfig(BaseModel):
    """
    Contrato de Configuração do harvester.
    Define tudo que é necessário para colher, resolver e guardar os links de
    um texto.
    """

    job_name: str
    environment: str = Field(default="dev", pattern="^(dev|staging|prod)$")

    # Regras (ordered: the first ignore pattern that matches decides)
    ignore_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS)
    )
    clean_param_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CLEAN_PARAM_PATTERNS)
    )
    discovery_pattern: Optional[str] = None

    # Resolução
    follow_html_redirects: bool = False
    keep_html_redirect_referrers: bool = False
    max_html_redirects: int = Field(default=1, ge=0, le=10)
    default_scheme: Optional[str] = "http"
    request_timeout: float = Field(default=15.0, gt=0)
    retries: int = Field(default=3, ge=0)
    backoff_factor: float = Field(default=0.3, ge=0)
    max_workers: int = Field(default=1, ge=1, le=64)

    # Chaves
    key_max_attempts: int = Field(default=10_000, ge=1)
    template_params: Dict[str, Any] = Field(default_factory=dict)

    # Destino
    destination_bucket: str = "local"
    destination_path: str = "harvested"
    output_format: str = Field(default="jsonl", pattern="^(jsonl|csv|parquet)$")

    execution_date: str = Field(
        default_factory=lambda: datetime.now().strftime("%Y-%m-%d")
    )

    @property
    def output_path(self) -> str:
        """Caminho padrão dos registros colhidos.

        Formato: <destination_path>/<job_name>/data_captura=YYYY-MM-DD
        """
        return (
            f"{self.destination_path}/"
            f"{self.job_name}/data_captura={self.execution_date}"
        )

    @field_validator("job_name")
    def job_name_must_be_slug(cls, v):
        if " " in v:
            raise ValueError("job_name must not contain spaces")
        return v.lower()

    @field_validator("ignore_patterns", "clean_param_patterns")
    def patterns_must_compile(cls, v):
        for p in v:
            try:
                re.compile(p)
            except re.error as exc:
                raise ValueError(f"invalid pattern {p!r}: {exc}") from exc
        return v

    @field_validator("discovery_pattern")
    def discovery_pattern_must_compile(cls, v):
        if v is not None:
            try:
                re.compile(v)
            except re.error as exc:
                raise ValueError(f"invalid discovery pattern {v!r}: {exc}") from exc
        return v
