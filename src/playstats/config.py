from __future__ import annotations
from pydantic import BaseModel
from typing import Optional
import yaml

class LoggingCfg(BaseModel):
    level: str = "INFO"
    log_file: Optional[str] = None
    capture_warnings: bool = True

class IngestCfg(BaseModel):
    strict_tags: bool = False  # unknown tags reject the play instead of being dropped

class AggregationCfg(BaseModel):
    max_workers: int = 4
    round_digits: int = 1

class FullConfig(BaseModel):
    season: str = "2024"
    logging: LoggingCfg = LoggingCfg()
    ingest: IngestCfg = IngestCfg()
    aggregation: AggregationCfg = AggregationCfg()

def load_config(path: str) -> FullConfig:
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return FullConfig.model_validate(raw)
