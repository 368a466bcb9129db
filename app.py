"""
Process entry point for the Jan Sahayak API server.
"""
import os

from dotenv import load_dotenv

load_dotenv()

from jansahayak.server import app

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
