# =======================================================================================
# fingerprint_bridge/__main__.py - Bridge Service Launcher
# =======================================================================================
import uvicorn
from .config import config
from .logging_config import setup_logging


def main() -> None:
    """Run the bridge control plane with uvicorn."""
    setup_logging(config)
    uvicorn.run(
        "fingerprint_bridge.main:app",
        host=config.BRIDGE_HOST,
        port=config.BRIDGE_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
