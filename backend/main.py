# backend/main.py
import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db

# Router imports
from routes.products import router as products_router
from routes.clients import router as clients_router
from routes.transactions import router as transactions_router
from routes.stock import router as stock_router
from routes.reports import router as reports_router
from routes.invoice import router as invoice_router
from routes.company import router as company_router
from routes.logs import router as logs_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Initialisation
init_db()

app = FastAPI(title="BillStock API", version="1.0.0")

# CORS: local frontend plus the deployed one from the environment
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router registration
app.include_router(products_router)
app.include_router(clients_router)
app.include_router(transactions_router)
app.include_router(reports_router)
app.include_router(invoice_router)
app.include_router(company_router)
app.include_router(logs_router)

# Stock registration
app.include_router(stock_router, prefix="/stock")


@app.get("/")
def read_root():
    return {"message": "BillStock API is running"}
