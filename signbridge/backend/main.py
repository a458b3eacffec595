import logging
import os

import uvicorn
from dotenv import load_dotenv


def main():
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    # import after .env is loaded so the engine sees SIGNBRIDGE_DATABASE_URL
    from signbridge.backend.db import Base, engine
    from signbridge.backend.api.app import app

    Base.metadata.create_all(engine)
    uvicorn.run(
        app,
        host=os.getenv("SIGNBRIDGE_HOST", "127.0.0.1"),
        port=int(os.getenv("SIGNBRIDGE_PORT", "8000")),
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("Exit")
