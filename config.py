import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # Application
    app_name: str = os.getenv("APP_NAME", "Library Catalog")
    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()

    # Storage
    data_file: str = os.getenv("LIBRARY_DATA_FILE", "library.json")

    # Lending rules
    loan_days: int = int(os.getenv("LOAN_DAYS", "28"))

    # CLI output: plain | json | rich
    output_mode: str = os.getenv("LIB_CLI_OUTPUT", "plain").lower()


settings = Settings()
