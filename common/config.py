from pydantic_settings import BaseSettings


class GatewaySettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000
    extraction_url: str = "http://extraction:8002/extract-clinical-data"
    extraction_timeout_s: float = 120.0
    max_sessions: int = 10
    recognition_lang: str = "en-US"
    continuous: bool = True
    interim_results: bool = True

    model_config = {"env_prefix": "GATEWAY_"}


class ExtractionSettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8002
    cohere_api_url: str = "https://api.cohere.com"
    cohere_api_key: str = ""
    model_name: str = "command-a-03-2025"
    timeout_s: float = 120.0

    model_config = {"env_prefix": "EXTRACTION_"}
