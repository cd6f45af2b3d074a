import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from config import DEBUG, APP_HOST, APP_PORT, LOG_LEVEL
from database.init import Base, engine
from routes import (
    auth_routes,
    pg_routes,
    room_routes,
    tenant_routes,
    visit_request_routes,
    onboarding_request_routes,
    workflow_routes,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="HostelMate API", debug=DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_routes.router)
app.include_router(pg_routes.router)
app.include_router(room_routes.router)
app.include_router(tenant_routes.router)
app.include_router(visit_request_routes.router)
app.include_router(onboarding_request_routes.router)
app.include_router(workflow_routes.router)


@app.get("/")
def read_root():
    return {"name": "HostelMate API", "version": "1.0.0"}


if __name__ == "__main__":
    uvicorn.run("main:app", host=APP_HOST, port=APP_PORT, reload=DEBUG)
