# backend/stockdb/serve.py
"""Run the inventory API with uvicorn (``python -m stockdb.serve`` or ``stockdb-serve``)."""

import os

import uvicorn


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").strip().lower() in {"1", "true", "yes", "on"}


def main() -> None:
    uvicorn.run(
        "stockdb.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        reload=_env_flag("RELOAD"),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        proxy_headers=True,
        forwarded_allow_ips=os.getenv("FORWARDED_ALLOW_IPS", "*"),
    )


if __name__ == "__main__":
    main()
