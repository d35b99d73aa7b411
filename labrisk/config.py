import os
from typing import Literal

import streamlit as st
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def get_secret(name: str, default: str = "") -> str:
    try:
        return st.secrets.get(name, os.getenv(name, default))
    except Exception:
        # no secrets.toml outside Streamlit Cloud / local .streamlit
        return os.getenv(name, default)


class Settings(BaseModel):
    llm_api_key: str = Field("")
    llm_base_url: str = Field("https://api.openai.com/v1")
    llm_model: str = Field("gpt-4o-mini")
    llm_timeout_s: float = Field(default=45.0, gt=0)
    pubchem_base_url: str = Field("https://pubchem.ncbi.nlm.nih.gov/rest")
    http_timeout_s: float = Field(default=25.0, gt=0)
    user_agent: str = Field("LabRiskDraft/0.3")
    max_candidates: int = Field(default=12, ge=1, le=50)
    request_delay_s: float = Field(default=0.3, ge=0)
    min_procedure_length: int = Field(default=20, ge=1)
    app_env: Literal["development", "staging", "production"] = Field("development")
    log_level: str = Field("INFO")


def load_settings() -> Settings:
    return Settings(
        llm_api_key=get_secret("LLM_API_KEY", "") or get_secret("OPENAI_API_KEY", ""),
        llm_base_url=(get_secret("LLM_BASE_URL", "") or "https://api.openai.com/v1").rstrip("/"),
        llm_model=get_secret("LLM_MODEL", "") or "gpt-4o-mini",
        llm_timeout_s=float(get_secret("LLM_TIMEOUT_S", "45")),
        pubchem_base_url=(get_secret("PUBCHEM_BASE_URL", "") or "https://pubchem.ncbi.nlm.nih.gov/rest").rstrip("/"),
        http_timeout_s=float(get_secret("HTTP_TIMEOUT_S", "25")),
        max_candidates=int(get_secret("MAX_CANDIDATES", "12")),
        request_delay_s=float(get_secret("REQUEST_DELAY_S", "0.3")),
        min_procedure_length=int(get_secret("MIN_PROCEDURE_LENGTH", "20")),
        app_env=get_secret("APP_ENV", "development") or "development",
        log_level=get_secret("LOG_LEVEL", "INFO") or "INFO",
    )
