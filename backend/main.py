import uvicorn

from moat.config import settings

# Run from the backend directory:
#   python main.py
# or
#   uvicorn moat.main:app --reload
if __name__ == "__main__":
    uvicorn.run("moat.main:app", host="0.0.0.0", port=settings.port, reload=settings.app_env == "development")
