# src/sol_fee_lookback/config.py
import os
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from .errors import InputError

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"


class Config(BaseModel):
    # the endpoint is the only setting read from the environment
    rpc_url: str = Field(default_factory=lambda: os.getenv("SOLANA_RPC_URL") or DEFAULT_RPC_URL)
    rpc_timeout_sec: float = Field(15.0, gt=0)
    page_limit: int = Field(100, gt=0, le=1000)
    fetch_workers: int = Field(4, gt=0, le=32)


def load_config(**overrides: Any) -> Config:
    """Config from defaults/env, with non-None keyword overrides applied."""
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return Config(**values)
    except ValidationError as e:
        raise InputError(f"invalid configuration: {e}") from e


def resolve_rpc_url(cli_value: Optional[str]) -> Optional[str]:
    if cli_value is None:
        return None
    cli_value = cli_value.strip()
    if not cli_value.startswith(("http://", "https://")):
        raise InputError(f"rpc endpoint must be an http(s) URL, got {cli_value!r}")
    return cli_value
