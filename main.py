import os
import sys
import traceback
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# Load .env before reading PORT/HOST/ENVIRONMENT
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


if __name__ == "__main__":
    """
    Entry point for IoT Hub.
    Serves the HTTP API and runs the minute trigger in-process.
    """
    PORT = int(os.getenv("PORT", "8000"))
    HOST = os.getenv("HOST", "127.0.0.1")
    ENVIRONMENT = os.getenv("ENVIRONMENT", "production").lower()

    print(f"Starting IoT Hub ({ENVIRONMENT}) on http://{HOST}:{PORT}")
    print("Press CTRL+C to stop the server")

    try:
        # Single worker: every worker process would start its own minute trigger
        uvicorn.run(
            "iothub_web.main:create_app",
            factory=True,
            host=HOST,
            port=PORT,
            reload=ENVIRONMENT == "development",
            log_level="info" if ENVIRONMENT == "production" else "debug",
        )
    except KeyboardInterrupt:
        print("\n\nShutdown complete.")
        sys.exit(0)
    except Exception as e:
        print(f"\nFatal error: {e}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        sys.exit(1)
