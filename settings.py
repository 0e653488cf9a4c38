# settings.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # -----------------------
    # DB (recipient store)
    # -----------------------
    DATABASE_URL: str = Field(default="")

    # -----------------------
    # App / admin surface
    # -----------------------
    ENV: str = "dev"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    ADMIN_API_TOKEN: str = ""

    # -----------------------
    # Bridge API
    # -----------------------
    BRIDGE_API_BASE_URL: str = "https://api.bridge.xyz/v0"
    BRIDGE_API_KEY: str = ""
    # ms, kept as raw strings: bad values fall back to defaults instead of failing startup
    BRIDGE_API_TIMEOUT_MS: str = ""
    BRIDGE_ONBOARDING_REDIRECT_URI: str = ""
    BRIDGE_STRICT_STARTUP_VALIDATION: bool = False

    # -----------------------
    # Payout dispatch
    # -----------------------
    SEND_BRIDGE_PAYOUT_PROVIDER_NAME: str = "bridge"
    SEND_BRIDGE_PAYOUT_API_KEY: str = ""
    SEND_BRIDGE_PAYOUT_API_KEY_HEADER: str = "Api-Key"
    SEND_BRIDGE_PAYOUT_EXECUTE_URL: str = ""
    SEND_BRIDGE_PAYOUT_PATH: str = "/transfers"
    SEND_BRIDGE_PAYOUT_TIMEOUT_MS: str = ""
    SEND_BRIDGE_PAYOUT_ENABLED_REGIONS: str = "US"
    SEND_BRIDGE_BANK_ETA: str = "1-3 business days"
    SEND_BRIDGE_ON_BEHALF_OF: str = ""
    SEND_BRIDGE_USE_RECIPIENT_ON_BEHALF_OF: str = "true"

    # -----------------------
    # Recipient onboarding
    # -----------------------
    SEND_BRIDGE_REQUIRE_RECIPIENT_ONBOARDING: str = "false"
    SEND_BRIDGE_RECIPIENT_CUSTOMER_TYPE: str = "individual"  # "individual" or "business"
    SEND_BRIDGE_RECIPIENT_DEFAULT_FULL_NAME: str = ""
    SEND_BRIDGE_ONBOARDING_REDIRECT_URI: str = ""
    SEND_CLAIM_APP_URL: str = ""
    SEND_BRIDGE_EXTERNAL_ACCOUNT_LOOKUP_LIMIT: str = ""

    # Per-method recipient destination (shared values are the fallback)
    SEND_BRIDGE_RECIPIENT_DESTINATION_PAYMENT_RAIL: str = ""
    SEND_BRIDGE_RECIPIENT_DESTINATION_CURRENCY: str = ""
    SEND_BRIDGE_RECIPIENT_DEBIT_DESTINATION_PAYMENT_RAIL: str = ""
    SEND_BRIDGE_RECIPIENT_DEBIT_DESTINATION_CURRENCY: str = ""
    SEND_BRIDGE_RECIPIENT_BANK_DESTINATION_PAYMENT_RAIL: str = ""
    SEND_BRIDGE_RECIPIENT_BANK_DESTINATION_CURRENCY: str = ""
    SEND_BRIDGE_RECIPIENT_DEBIT_EXTERNAL_ACCOUNT_RAILS: str = ""
    SEND_BRIDGE_RECIPIENT_BANK_EXTERNAL_ACCOUNT_RAILS: str = ""

    # -----------------------
    # Transfer source
    # -----------------------
    SEND_BRIDGE_TRANSFER_SOURCE_JSON: str = ""
    SEND_BRIDGE_SOURCE_PAYMENT_RAIL: str = "ethereum"
    SEND_BRIDGE_SOURCE_CURRENCY: str = "usdc"
    SEND_BRIDGE_SOURCE_FROM_ADDRESS: str = ""
    SEND_BRIDGE_SOURCE_BRIDGE_WALLET_ID: str = ""
    SEND_PAYOUT_TREASURY: str = ""

    # -----------------------
    # Transfer destination
    # -----------------------
    SEND_BRIDGE_TRANSFER_DESTINATION_JSON: str = ""
    SEND_BRIDGE_DESTINATION_PAYMENT_RAIL: str = "prefunded"
    SEND_BRIDGE_DESTINATION_CURRENCY: str = "usd"
    SEND_BRIDGE_DESTINATION_PREFUNDED_ACCOUNT_ID: str = ""
    SEND_BRIDGE_DESTINATION_ADDRESS: str = ""
    SEND_BRIDGE_DESTINATION_EXTERNAL_ACCOUNT_ID: str = ""



settings = Settings()
