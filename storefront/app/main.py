from fastapi import FastAPI
from storefront.app.api.v1.router import router as v1_router
from storefront.app.logging_setup import setup_logging

setup_logging()

app = FastAPI(title="Storefront API", version="0.1.0")
app.include_router(v1_router, prefix="/v1")
