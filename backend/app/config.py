from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "", "case_sensitive": False}

    # App
    environment: str = "development"
    debug: bool = True
    app_name: str = "SolarSizer"
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Logging
    log_json: bool = False

    # Time-series data
    data_dir: str = "data"
    solar_file: str = "ts_res.csv"
    demand_file: str = "demand.csv"
    profile_file: str = "when2heat_processed_2022.csv"
    profile_country: str = "ES"

    # Sweeps
    sweep_max_workers: int = 1
    sweep_max_points: int = 50


settings = Settings()
