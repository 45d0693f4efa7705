import os
import tomllib
from pathlib import Path

pkg_root = Path(__file__).parent
config_file = pkg_root / "config.toml"

cfg = tomllib.loads(Path(config_file).read_text())

# Environment takes precedence over the packaged file
cfg["node"]["rpc"] = os.getenv("RPC_URL", cfg["node"]["rpc"]).rstrip("/")
cfg["files"]["wallets"] = os.getenv("WALLETS_FILE", cfg["files"]["wallets"])
cfg["files"]["proxies"] = os.getenv("PROXIES_FILE", cfg["files"]["proxies"])
