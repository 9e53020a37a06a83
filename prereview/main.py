"""
FastAPI application exposing PreReview to editors and other local tools.
"""
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prereview.api.feedback import feedback_router
from prereview.api.review import review_router

# Load environment variables
load_dotenv()

app = FastAPI(title="PreReview", version="1.0.0")

# only local editor integrations may call the API from a browser
LOCAL_ORIGINS = r"https?://(localhost|127\.0\.0\.1|\[::1\])(:\d+)?\Z"

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=LOCAL_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(review_router, prefix="/api", tags=["review"])
app.include_router(feedback_router, prefix="/api", tags=["feedback"])


@app.get("/")
async def read_root():
    """Service banner."""
    return {"message": "PreReview API", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("API_PORT", 8000))
    uvicorn.run(app, host="127.0.0.1", port=port)
