"""Configuration - loads from .env file"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# API endpoints
SUPRA_RPC_URL = os.getenv("SUPRA_RPC_URL", "https://rpc-mainnet.supra.com")
COINGECKO_API_URL = os.getenv("COINGECKO_API_URL", "https://api.coingecko.com/api/v3")

# Native SUPRA
SUPRA_DECIMALS = 8
DISPLAY_DECIMALS = 6
SUPRA_COINSTORE_TYPE = "0x1::coin::CoinStore<0x1::supra_coin::SupraCoin>"

# SUPRAWR (Atmos Pump token) used for access gating and holder rank
SUPRAWR_TOKEN_ADDRESS = "0x82ed1f483b5fc4ad105cef5330e480136d58156c30dc70cd2b9c342981997cee"
ATMOS_SWAP_ADDRESS = "0xa4a4a31116e114bf3c4f4728914e6b43db73279a4421b0768993e07248fe2234"
SUPRAWR_DECIMALS = 6
REQUIRED_SUPRAWR_WHOLE = int(os.getenv("REQUIRED_SUPRAWR_WHOLE", "1000"))

# Lifetime scan parameters
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "100"))
MAX_PAGES = int(os.getenv("MAX_PAGES", "5000"))
COOLDOWN_SECONDS = int(os.getenv("COOLDOWN_SECONDS", "60"))

# Performance settings
MAX_CONNECTIONS = int(os.getenv("MAX_CONNECTIONS", "10"))
CONNECTION_TIMEOUT = 30
REQUEST_RETRY_ATTEMPTS = 3

# Database
DATABASE_PATH = os.getenv("DATABASE_PATH", "data/gas_tracker.db")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "data/gas_tracker.log")
