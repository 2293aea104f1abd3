"""Start the invoice server under uvicorn.

HOST / PORT come from the environment (default 127.0.0.1:3000). Auto-reload
is on in development only.
"""
import os
import signal
import sys

import uvicorn

from invoice_server.core.config import settings


def _stop(signum, frame):
    print(f"\nSignal {signum} received, stopping invoice server")
    sys.exit(0)


def main():
    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "3000"))
    print(f"Invoice server on http://{host}:{port} ({settings.ENVIRONMENT}, docs at /docs)")
    if not settings.API_SECURE:
        print("WARNING: API_SECURE=false, authentication is bypassed")

    uvicorn.run(
        "invoice_server.main:app",
        host=host,
        port=port,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
